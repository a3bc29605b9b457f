"""Password hashing for credentials stored in ``users.password``."""

import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def generate_one_time_password(length: int = 24) -> str:
    """Random URL-safe password for bootstrap accounts."""
    return secrets.token_urlsafe(length)
