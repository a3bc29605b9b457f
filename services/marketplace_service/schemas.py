"""Pydantic schemas for marketplace service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from libs.common.datetime_utils import is_expired as coupon_expired
from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field
from services.marketplace_service.models import (
    InventoryReason,
    MerchantStatus,
    NotificationType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    UserRole,
)

# ============================================================================
# USER SCHEMAS
# ============================================================================


class UserCreate(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    password: str = Field(..., min_length=8)
    # Admin accounts are issued by seed_admin, never self-registered
    role: Literal["customer", "merchant"] = "customer"


class UserUpdate(BaseModel):
    # Roles are not self-service; unknown fields such as "role" are rejected
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture: Optional[str] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    role: UserRole
    profile_picture: Optional[str] = None
    created_at: datetime


# ============================================================================
# MERCHANT SCHEMAS
# ============================================================================


class MerchantBase(BaseModel):
    business_name: str
    business_email: EmailStr
    phone: Optional[str] = None
    logo: Optional[str] = None


class MerchantCreate(MerchantBase):
    pass


class MerchantUpdate(BaseModel):
    # Status is set through MerchantStatusUpdate by an admin
    model_config = ConfigDict(extra="forbid")

    business_name: Optional[str] = None
    business_email: Optional[EmailStr] = None
    phone: Optional[str] = None
    logo: Optional[str] = None


class MerchantStatusUpdate(BaseModel):
    status: MerchantStatus


class MerchantResponse(MerchantBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: Optional[uuid.UUID] = None
    business_email: str
    status: MerchantStatus
    created_at: datetime


# ============================================================================
# ADDRESS & NOTIFICATION SCHEMAS
# ============================================================================


class AddressBase(BaseModel):
    full_name: str
    street_address: str
    city: str
    state: str
    postal_code: str
    country: str
    phone: str
    is_default: bool = False


class AddressCreate(AddressBase):
    pass


class AddressUpdate(BaseModel):
    full_name: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    is_default: Optional[bool] = None


class AddressResponse(AddressBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    created_at: datetime


class NotificationCreate(BaseModel):
    user_id: uuid.UUID
    message: str
    type: Optional[NotificationType] = NotificationType.GENERAL


class NotificationUpdate(BaseModel):
    is_read: bool


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    message: str
    type: Optional[NotificationType] = None
    is_read: bool
    created_at: datetime


# ============================================================================
# CATALOG SCHEMAS
# ============================================================================


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)


class CategoryResponse(CategoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID


class ProductBase(BaseModel):
    merchant_id: uuid.UUID
    name: str
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    category_id: Optional[uuid.UUID] = None
    stock_quantity: int = 0
    images: Optional[list[str]] = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    category_id: Optional[uuid.UUID] = None
    stock_quantity: Optional[int] = None
    images: Optional[list[str]] = None


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    merchant_id: Optional[uuid.UUID] = None
    created_at: datetime


class InventoryCreate(BaseModel):
    product_id: uuid.UUID
    stock_change: int
    reason: InventoryReason = InventoryReason.SALE


class InventoryResponse(InventoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: Optional[uuid.UUID] = None
    created_at: datetime


class CouponCreate(BaseModel):
    code: str = Field(..., min_length=1)
    discount_percentage: Decimal = Field(..., ge=0, le=100, decimal_places=2)
    expires_at: Optional[datetime] = None


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    discount_percentage: Optional[Decimal] = None
    expires_at: Optional[datetime] = None
    created_at: datetime

    @computed_field
    @property
    def is_expired(self) -> bool:
        return coupon_expired(self.expires_at)


# ============================================================================
# ORDER & PAYMENT SCHEMAS
# ============================================================================


class OrderItemCreate(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class OrderItemResponse(OrderItemCreate):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: Optional[uuid.UUID] = None
    product_id: Optional[uuid.UUID] = None


class OrderCreate(BaseModel):
    merchant_id: uuid.UUID
    items: list[OrderItemCreate] = Field(..., min_length=1)

    @property
    def total_price(self) -> Decimal:
        return sum((item.price * item.quantity for item in self.items), Decimal("0"))


class OrderUpdate(BaseModel):
    status: OrderStatus


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    merchant_id: Optional[uuid.UUID] = None
    total_price: Decimal
    status: OrderStatus
    created_at: datetime


class PaymentCreate(BaseModel):
    order_id: uuid.UUID
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    payment_method: PaymentMethod


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    amount: Decimal
    payment_method: Optional[PaymentMethod] = None
    status: PaymentStatus
    created_at: datetime


# ============================================================================
# REVIEW & WISHLIST SCHEMAS
# ============================================================================


class ReviewCreate(BaseModel):
    product_id: uuid.UUID
    rating: int = Field(..., ge=1, le=5)
    review_text: Optional[str] = None
    images: Optional[list[str]] = None


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    review_text: Optional[str] = None
    images: Optional[list[str]] = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    product_id: Optional[uuid.UUID] = None
    rating: Optional[int] = None
    review_text: Optional[str] = None
    images: Optional[list[str]] = None
    created_at: datetime


class WishlistCreate(BaseModel):
    product_id: uuid.UUID


class WishlistResponse(WishlistCreate):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    product_id: Optional[uuid.UUID] = None
    created_at: datetime
