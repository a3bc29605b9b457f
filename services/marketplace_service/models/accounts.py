"""Account models: users, merchant stores, addresses and notifications."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.marketplace_service.models.enums import (
    MerchantStatus,
    NotificationType,
    UserRole,
    check_in,
)
from services.marketplace_service.models.types import TextEnum
from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# USERS
# ============================================================================


class User(Base):
    """Customers, merchants and admins."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    # Always a passlib hash, never the plain password
    password: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        TextEnum(UserRole), default=UserRole.CUSTOMER, server_default="customer"
    )
    profile_picture: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(), default=utc_now, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(check_in("role", UserRole), name="role"),
        Index("idx_users_email", "email"),
    )

    # Relationships (rows are removed by ON DELETE CASCADE in the database)
    merchants = relationship(
        "Merchant",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    addresses = relationship(
        "Address",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    notifications = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"


# ============================================================================
# MERCHANTS
# ============================================================================


class Merchant(Base):
    """A store owned by a single user."""

    __tablename__ = "merchants"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE")
    )
    business_name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    business_email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Moves out of pending only through an admin decision
    status: Mapped[MerchantStatus] = mapped_column(
        TextEnum(MerchantStatus),
        default=MerchantStatus.PENDING,
        server_default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(), default=utc_now, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(check_in("status", MerchantStatus), name="status"),
        Index("idx_merchants_email", "business_email"),
    )

    owner = relationship("User", back_populates="merchants")
    products = relationship(
        "Product",
        back_populates="merchant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Merchant {self.business_name} ({self.status})>"


# ============================================================================
# ADDRESSES & NOTIFICATIONS
# ============================================================================


class Address(Base):
    """Shipping and billing addresses."""

    __tablename__ = "addresses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE")
    )
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    street_address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(Text, nullable=False)
    postal_code: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    is_default: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(), default=utc_now, server_default=func.now()
    )

    user = relationship("User", back_populates="addresses")

    def __repr__(self):
        return f"<Address {self.city}, {self.country}>"


class Notification(Base):
    """Push and email alerts for a user."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE")
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[Optional[NotificationType]] = mapped_column(
        TextEnum(NotificationType), nullable=True
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(), default=utc_now, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(check_in("type", NotificationType), name="type"),
    )

    user = relationship("User", back_populates="notifications")

    def __repr__(self):
        return f"<Notification {self.type} read={self.is_read}>"
