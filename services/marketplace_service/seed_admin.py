"""Bootstrap the platform admin account.

Creates the admin user from ``ADMIN_EMAIL`` with a hashed password. If
``ADMIN_PASSWORD`` is not set, a one-time password is generated and printed
once; rotate it after the first sign-in. Running again is a no-op.

Usage:
    cd knitkits-backend
    python -m services.marketplace_service.seed_admin
"""

import asyncio
from typing import Optional

from libs.auth.passwords import generate_one_time_password, hash_password
from libs.common.config import get_settings
from libs.common.logging import configure_logging, get_logger
from services.marketplace_service.models import User, UserRole
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def seed_admin(
    db: AsyncSession,
    *,
    email: str,
    first_name: str = "Admin",
    last_name: str = "User",
    password: Optional[str] = None,
) -> tuple[User, Optional[str]]:
    """Create the admin user if missing.

    Returns ``(user, issued_password)``; ``issued_password`` is the generated
    one-time password, or None when one was supplied or the user existed.
    """
    result = await db.execute(select(User).where(User.email == email))
    existing = result.scalar_one_or_none()
    if existing:
        if existing.role != UserRole.ADMIN:
            logger.warning("User %s exists but is not an admin; leaving it", email)
        return existing, None

    issued = None
    if not password:
        issued = generate_one_time_password()
        password = issued

    admin = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=hash_password(password),
        role=UserRole.ADMIN,
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)

    logger.info("Created admin user %s (%s)", admin.email, admin.id)
    return admin, issued


async def main() -> None:
    from libs.db.config import AsyncSessionLocal

    configure_logging()
    settings = get_settings()
    async with AsyncSessionLocal() as db:
        admin, issued = await seed_admin(
            db,
            email=settings.ADMIN_EMAIL,
            first_name=settings.ADMIN_FIRST_NAME,
            last_name=settings.ADMIN_LAST_NAME,
            password=settings.ADMIN_PASSWORD,
        )
    if issued:
        print(f"One-time password for {admin.email}: {issued}")
        print("Change it after the first sign-in; it will not be shown again.")


if __name__ == "__main__":
    asyncio.run(main())
