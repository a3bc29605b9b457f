"""Integration tests for the admin bootstrap command."""

import pytest
from libs.auth.passwords import verify_password
from services.marketplace_service.models import User, UserRole
from services.marketplace_service.seed_admin import seed_admin
from sqlalchemy import func, select
from tests.factories import UserFactory, persist


@pytest.mark.asyncio
@pytest.mark.integration
async def test_seed_admin_issues_one_time_password(db_session):
    admin, issued = await seed_admin(db_session, email="admin@knitkits.com")

    assert admin.role == UserRole.ADMIN
    assert issued
    assert admin.password != issued
    assert verify_password(issued, admin.password)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_seed_admin_hashes_supplied_password(db_session):
    admin, issued = await seed_admin(
        db_session, email="ops@knitkits.com", password="supplied-secret"
    )

    assert issued is None
    assert admin.password != "supplied-secret"
    assert verify_password("supplied-secret", admin.password)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_seed_admin_is_idempotent(db_session):
    first, _ = await seed_admin(db_session, email="admin@knitkits.com")
    second, issued = await seed_admin(db_session, email="admin@knitkits.com")

    assert second.id == first.id
    assert issued is None
    result = await db_session.execute(select(func.count()).select_from(User))
    assert result.scalar_one() == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_seed_admin_leaves_existing_non_admin_alone(db_session):
    customer = await persist(
        db_session, UserFactory.create(email="admin@knitkits.com")
    )

    existing, issued = await seed_admin(db_session, email="admin@knitkits.com")

    assert existing.id == customer.id
    assert existing.role == UserRole.CUSTOMER
    assert issued is None
