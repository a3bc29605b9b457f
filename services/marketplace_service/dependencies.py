"""FastAPI dependencies resolving the caller and their repository."""

import uuid

from fastapi import Depends, HTTPException, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.db.session import bind_rls_identity, get_async_db
from services.marketplace_service.models import User, UserRole
from services.marketplace_service.policies import Caller
from services.marketplace_service.services.repository import AuthorizedRepository
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def get_caller(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> Caller:
    """Turn the verified token subject into a policy ``Caller``.

    The marketplace role comes from ``users.role``; callers without a users
    row yet (first sign-in) are customers.
    """
    try:
        user_id = uuid.UUID(current_user.user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token subject is not a user id",
        )

    result = await db.execute(select(User.role).where(User.id == user_id))
    role = result.scalar_one_or_none() or UserRole.CUSTOMER

    if get_settings().DB_ENFORCE_RLS:
        await bind_rls_identity(db, str(user_id))

    return Caller(user_id=user_id, role=UserRole(role))


async def get_repository(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
) -> AuthorizedRepository:
    return AuthorizedRepository(db, caller)


async def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    """Reject callers whose ``users.role`` is not admin."""
    if not caller.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return caller


async def get_admin_repository(
    caller: Caller = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
) -> AuthorizedRepository:
    return AuthorizedRepository(db, caller)
