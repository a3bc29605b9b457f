"""Orders router: order records, their items, and payment records.

Checkout and payment capture are handled by other services; these routes
only store and read rows under the row-level policies.
"""

import uuid

from fastapi import APIRouter, Depends, status
from services.marketplace_service.dependencies import get_repository
from services.marketplace_service.models import (
    Order,
    OrderItem,
    OrderStatus,
    Payment,
    PaymentStatus,
)
from services.marketplace_service.schemas import (
    OrderCreate,
    OrderItemResponse,
    OrderResponse,
    OrderUpdate,
    PaymentCreate,
    PaymentResponse,
)
from services.marketplace_service.services.repository import AuthorizedRepository

router = APIRouter(tags=["orders"])


# ============================================================================
# ORDERS
# ============================================================================


@router.get("/orders", response_model=list[OrderResponse])
async def list_orders(repo: AuthorizedRepository = Depends(get_repository)):
    return await repo.list(Order, order_by=Order.created_at.desc())


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.get(Order, order_id)


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    payload: OrderCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    """Record an order and its items atomically for the caller."""
    order = Order(
        id=uuid.uuid4(),
        user_id=repo.caller.user_id,
        merchant_id=payload.merchant_id,
        total_price=payload.total_price,
        status=OrderStatus.PENDING,
    )
    items = [
        OrderItem(order_id=order.id, **item.model_dump()) for item in payload.items
    ]
    await repo.insert_many(order, *items)
    return order


@router.patch("/orders/{order_id}", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    payload: OrderUpdate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.update(Order, order_id, {"status": payload.status})


@router.get("/orders/{order_id}/items", response_model=list[OrderItemResponse])
async def list_order_items(
    order_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.list(OrderItem, OrderItem.order_id == order_id)


# ============================================================================
# PAYMENTS
# ============================================================================


@router.get("/payments", response_model=list[PaymentResponse])
async def list_payments(repo: AuthorizedRepository = Depends(get_repository)):
    return await repo.list(Payment, order_by=Payment.created_at.desc())


@router.post(
    "/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED
)
async def record_payment(
    payload: PaymentCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    """Record a pending payment attempt for one of the caller's orders."""
    payment = Payment(
        user_id=repo.caller.user_id,
        status=PaymentStatus.PENDING,
        **payload.model_dump(),
    )
    return await repo.insert(payment)
