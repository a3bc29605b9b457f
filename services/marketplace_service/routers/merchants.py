"""Merchants router: store registration and management."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from services.marketplace_service.dependencies import (
    get_admin_repository,
    get_repository,
)
from services.marketplace_service.models import Merchant, MerchantStatus
from services.marketplace_service.schemas import (
    MerchantCreate,
    MerchantResponse,
    MerchantStatusUpdate,
    MerchantUpdate,
)
from services.marketplace_service.services.repository import AuthorizedRepository

router = APIRouter(tags=["merchants"])


@router.get("/merchants", response_model=list[MerchantResponse])
async def list_merchants(
    status_filter: Optional[MerchantStatus] = Query(None, alias="status"),
    repo: AuthorizedRepository = Depends(get_repository),
):
    """Stores the caller can see (their own; approved ones too if enabled)."""
    criteria = [Merchant.status == status_filter] if status_filter else []
    return await repo.list(Merchant, *criteria, order_by=Merchant.business_name)


@router.get("/merchants/{merchant_id}", response_model=MerchantResponse)
async def get_merchant(
    merchant_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.get(Merchant, merchant_id)


@router.post(
    "/merchants", response_model=MerchantResponse, status_code=status.HTTP_201_CREATED
)
async def open_store(
    payload: MerchantCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    """Register a store owned by the caller; it starts out pending."""
    merchant = Merchant(
        owner_id=repo.caller.user_id,
        status=MerchantStatus.PENDING,
        **payload.model_dump(),
    )
    return await repo.insert(merchant)


@router.patch("/merchants/{merchant_id}", response_model=MerchantResponse)
async def update_store(
    merchant_id: uuid.UUID,
    payload: MerchantUpdate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.update(
        Merchant, merchant_id, payload.model_dump(exclude_unset=True)
    )


@router.patch("/merchants/{merchant_id}/status", response_model=MerchantResponse)
async def set_store_status(
    merchant_id: uuid.UUID,
    payload: MerchantStatusUpdate,
    repo: AuthorizedRepository = Depends(get_admin_repository),
):
    """Approve or reject a store. Admins only."""
    return await repo.update(Merchant, merchant_id, {"status": payload.status})


@router.delete("/merchants/{merchant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_store(
    merchant_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    await repo.delete(Merchant, merchant_id)
