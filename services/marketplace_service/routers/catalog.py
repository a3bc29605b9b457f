"""Catalog router: categories, products, stock ledger and coupons."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from services.marketplace_service.dependencies import get_repository
from services.marketplace_service.models import (
    Category,
    Coupon,
    Inventory,
    Product,
)
from services.marketplace_service.schemas import (
    CategoryCreate,
    CategoryResponse,
    CouponCreate,
    CouponResponse,
    InventoryCreate,
    InventoryResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from services.marketplace_service.services.repository import AuthorizedRepository

router = APIRouter(tags=["catalog"])


# ============================================================================
# CATEGORIES
# ============================================================================


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(repo: AuthorizedRepository = Depends(get_repository)):
    return await repo.list(Category, order_by=Category.name)


@router.post(
    "/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED
)
async def create_category(
    payload: CategoryCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.insert(Category(name=payload.name))


# ============================================================================
# PRODUCTS
# ============================================================================


@router.get("/products", response_model=list[ProductResponse])
async def list_products(
    category_id: Optional[uuid.UUID] = None,
    merchant_id: Optional[uuid.UUID] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    repo: AuthorizedRepository = Depends(get_repository),
):
    criteria = []
    if category_id:
        criteria.append(Product.category_id == category_id)
    if merchant_id:
        criteria.append(Product.merchant_id == merchant_id)
    return await repo.list(
        Product,
        *criteria,
        order_by=Product.created_at.desc(),
        limit=limit,
        offset=offset,
    )


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.get(Product, product_id)


@router.post(
    "/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
async def create_product(
    payload: ProductCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.insert(Product(**payload.model_dump()))


@router.patch("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.update(
        Product, product_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    await repo.delete(Product, product_id)


# ============================================================================
# INVENTORY
# ============================================================================


@router.get(
    "/products/{product_id}/inventory", response_model=list[InventoryResponse]
)
async def list_stock_changes(
    product_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.list(
        Inventory,
        Inventory.product_id == product_id,
        order_by=Inventory.created_at,
    )


@router.post(
    "/inventory", response_model=InventoryResponse, status_code=status.HTTP_201_CREATED
)
async def record_stock_change(
    payload: InventoryCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    """Append a ledger entry; products.stock_quantity is maintained elsewhere."""
    return await repo.insert(Inventory(**payload.model_dump()))


# ============================================================================
# COUPONS
# ============================================================================


@router.get("/coupons", response_model=list[CouponResponse])
async def list_coupons(repo: AuthorizedRepository = Depends(get_repository)):
    return await repo.list(Coupon, order_by=Coupon.code)


@router.post(
    "/coupons", response_model=CouponResponse, status_code=status.HTTP_201_CREATED
)
async def create_coupon(
    payload: CouponCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.insert(Coupon(**payload.model_dump()))
