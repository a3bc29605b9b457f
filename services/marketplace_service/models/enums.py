"""Enum definitions for marketplace models.

Values are stored as TEXT with CHECK constraints (see ``check_in``), not as
native Postgres enum types.
"""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for an enum class."""
    return [member.value for member in enum_cls]


def check_in(column: str, enum_cls) -> str:
    """SQL for a ``column IN (...)`` CHECK constraint over an enum's values."""
    values = ", ".join(f"'{value}'" for value in enum_values(enum_cls))
    return f"{column} IN ({values})"


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    MERCHANT = "merchant"
    ADMIN = "admin"


class MerchantStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class InventoryReason(str, enum.Enum):
    SALE = "sale"
    RESTOCK = "restock"
    RETURN = "return"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    STRIPE = "stripe"
    MPESA = "mpesa"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class NotificationType(str, enum.Enum):
    ORDER = "order"
    PROMO = "promo"
    GENERAL = "general"
