"""Commerce models: orders, their line items, payments and coupons."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.marketplace_service.models.enums import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    check_in,
)
from services.marketplace_service.models.types import TextEnum
from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# ORDERS
# ============================================================================


class Order(Base):
    """A customer's order with a single merchant."""

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # The customer who placed the order
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE")
    )
    merchant_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("merchants.id", ondelete="CASCADE")
    )
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        TextEnum(OrderStatus), default=OrderStatus.PENDING, server_default="pending"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(), default=utc_now, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(check_in("status", OrderStatus), name="status"),
        Index("idx_orders_user", "user_id"),
    )

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Order {self.id} {self.status} total={self.total_price}>"


class OrderItem(Base):
    """Line item; ``price`` is the unit price at the time of purchase."""

    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE")
    )
    product_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE")
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    __table_args__ = (Index("idx_order_items_order", "order_id"),)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem product={self.product_id} qty={self.quantity}>"


# ============================================================================
# PAYMENTS
# ============================================================================


class Payment(Base):
    """Transaction record for an order (gateway integration lives elsewhere)."""

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE")
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE")
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(
        TextEnum(PaymentMethod), nullable=True
    )
    status: Mapped[PaymentStatus] = mapped_column(
        TextEnum(PaymentStatus),
        default=PaymentStatus.PENDING,
        server_default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(), default=utc_now, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            check_in("payment_method", PaymentMethod), name="payment_method"
        ),
        CheckConstraint(check_in("status", PaymentStatus), name="status"),
        Index("idx_payments_order", "order_id"),
    )

    def __repr__(self):
        return f"<Payment {self.payment_method} {self.status} amount={self.amount}>"


# ============================================================================
# COUPONS
# ============================================================================


class Coupon(Base):
    """Discount code."""

    __tablename__ = "coupons"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    discount_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(), default=utc_now, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "discount_percentage BETWEEN 0 AND 100", name="discount_percentage"
        ),
    )

    def __repr__(self):
        return f"<Coupon {self.code} {self.discount_percentage}%>"
