"""Marketplace Service models package."""

from services.marketplace_service.models.accounts import (
    Address,
    Merchant,
    Notification,
    User,
)
from services.marketplace_service.models.catalog import Category, Inventory, Product
from services.marketplace_service.models.commerce import (
    Coupon,
    Order,
    OrderItem,
    Payment,
)
from services.marketplace_service.models.engagement import Review, Wishlist
from services.marketplace_service.models.enums import (
    InventoryReason,
    MerchantStatus,
    NotificationType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    UserRole,
)

__all__ = [
    "Address",
    "Category",
    "Coupon",
    "Inventory",
    "InventoryReason",
    "Merchant",
    "MerchantStatus",
    "Notification",
    "NotificationType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Product",
    "Review",
    "User",
    "UserRole",
    "Wishlist",
]
