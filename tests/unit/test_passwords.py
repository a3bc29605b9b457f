"""Unit tests for credential hashing helpers."""

import pytest
from libs.auth.passwords import (
    generate_one_time_password,
    hash_password,
    verify_password,
)


@pytest.mark.unit
def test_hash_is_not_plaintext_and_verifies():
    hashed = hash_password("purl-and-knit")

    assert hashed != "purl-and-knit"
    assert hashed.startswith("$pbkdf2-sha256$")
    assert verify_password("purl-and-knit", hashed)
    assert not verify_password("wrong-password", hashed)


@pytest.mark.unit
def test_hashes_are_salted():
    assert hash_password("same") != hash_password("same")


@pytest.mark.unit
def test_one_time_passwords_are_random_and_long():
    first, second = generate_one_time_password(), generate_one_time_password()

    assert first != second
    assert len(first) >= 24
