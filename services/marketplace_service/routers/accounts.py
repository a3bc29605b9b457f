"""Accounts router: profile, addresses and notifications."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.passwords import hash_password
from services.marketplace_service.dependencies import get_repository
from services.marketplace_service.models import Address, Notification, User, UserRole
from services.marketplace_service.schemas import (
    AddressCreate,
    AddressResponse,
    AddressUpdate,
    NotificationCreate,
    NotificationResponse,
    NotificationUpdate,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from services.marketplace_service.services.repository import AuthorizedRepository

router = APIRouter(tags=["accounts"])


# ============================================================================
# PROFILE
# ============================================================================


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: UserCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    """Create the users row for the signed-in identity."""
    user = User(
        id=repo.caller.user_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=hash_password(payload.password),
        role=UserRole(payload.role),
    )
    return await repo.insert(user)


@router.get("/users/me", response_model=UserResponse)
async def get_profile(repo: AuthorizedRepository = Depends(get_repository)):
    return await repo.get(User, repo.caller.user_id)


@router.patch("/users/me", response_model=UserResponse)
async def update_profile(
    payload: UserUpdate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.update(
        User, repo.caller.user_id, payload.model_dump(exclude_unset=True)
    )


# ============================================================================
# ADDRESSES
# ============================================================================


@router.get("/addresses", response_model=list[AddressResponse])
async def list_addresses(repo: AuthorizedRepository = Depends(get_repository)):
    return await repo.list(Address, order_by=Address.created_at)


@router.post(
    "/addresses", response_model=AddressResponse, status_code=status.HTTP_201_CREATED
)
async def add_address(
    payload: AddressCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.insert(Address(user_id=repo.caller.user_id, **payload.model_dump()))


@router.patch("/addresses/{address_id}", response_model=AddressResponse)
async def update_address(
    address_id: uuid.UUID,
    payload: AddressUpdate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.update(
        Address, address_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/addresses/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(
    address_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    await repo.delete(Address, address_id)


# ============================================================================
# NOTIFICATIONS
# ============================================================================


@router.get("/notifications", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    repo: AuthorizedRepository = Depends(get_repository),
):
    criteria = [Notification.is_read.is_(False)] if unread_only else []
    return await repo.list(
        Notification, *criteria, order_by=Notification.created_at.desc()
    )


@router.post(
    "/notifications",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_notification(
    payload: NotificationCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    """Platform-issued notification (admins only under the marketplace set)."""
    return await repo.insert(Notification(**payload.model_dump()))


@router.patch("/notifications/{notification_id}", response_model=NotificationResponse)
async def mark_notification(
    notification_id: uuid.UUID,
    payload: NotificationUpdate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.update(
        Notification, notification_id, {"is_read": payload.is_read}
    )


@router.delete(
    "/notifications/{notification_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_notification(
    notification_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    await repo.delete(Notification, notification_id)
