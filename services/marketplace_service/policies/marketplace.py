"""Marketplace policy set: grants the core set leaves out.

Migration 0002 enabled row level security on products, payments and
notifications without any policy, and gave orders and users only one
operation each. This set (migration 0003) opens those tables to the callers
that need them, brings the remaining tables under RLS, gives admins full
access, and adds restrictive policies so owners cannot promote themselves.
"""

from services.marketplace_service.models import (
    Merchant,
    MerchantStatus,
    Notification,
    Order,
    OrderStatus,
    Payment,
    User,
    UserRole,
)
from services.marketplace_service.policies.core import CORE_RLS_TABLES
from services.marketplace_service.policies.engine import (
    ALL_OPERATIONS,
    Operation,
    Policy,
    PolicyContext,
    PolicyRegistry,
    Row,
)
from services.marketplace_service.policies.predicates import (
    admins_only,
    all_of,
    always,
    caller_is_admin,
    everyone,
    owned_by,
    owner_scope,
)
from sqlalchemy import select

MARKETPLACE_RLS_TABLES = CORE_RLS_TABLES + (
    "order_items",
    "inventory",
    "categories",
    "coupons",
)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _self_assignable_role(ctx: PolicyContext, row: Row) -> bool:
    return row.get("role") in (None, UserRole.CUSTOMER, UserRole.MERCHANT)


def _role_unchanged(ctx: PolicyContext, row: Row) -> bool:
    return ctx.caller.is_admin or row.get("role") == ctx.caller.role


def _is_pending(ctx: PolicyContext, row: Row) -> bool:
    return row.get("status") in (None, MerchantStatus.PENDING, OrderStatus.PENDING)


def _is_approved(ctx: PolicyContext, row: Row) -> bool:
    return row.get("status") == MerchantStatus.APPROVED


async def _merchant_status_unchanged(ctx: PolicyContext, row: Row) -> bool:
    if ctx.caller.is_admin:
        return True
    current = await ctx.lookups.merchant_status(row.get("id"))
    return current is not None and row.get("status") == current


def _runs_store(ctx: PolicyContext, row: Row):
    return ctx.lookups.owns_merchant(ctx.caller.user_id, row.get("merchant_id"))


def _sells_product(ctx: PolicyContext, row: Row):
    return ctx.lookups.owns_product(ctx.caller.user_id, row.get("product_id"))


def _placed_order(ctx: PolicyContext, row: Row):
    return ctx.lookups.owns_order(ctx.caller.user_id, row.get("order_id"))


def _fulfils_order(ctx: PolicyContext, row: Row):
    return ctx.lookups.sells_order(ctx.caller.user_id, row.get("order_id"))


def _store_orders_scope(caller):
    owned_stores = select(Merchant.id).where(Merchant.owner_id == caller.user_id)
    return Order.merchant_id.in_(owned_stores)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def marketplace_registry() -> PolicyRegistry:
    registry = PolicyRegistry().enable_rls(*MARKETPLACE_RLS_TABLES)

    for table in MARKETPLACE_RLS_TABLES:
        registry.register(
            Policy(
                name=f"Admins can manage {table}",
                table=table,
                operations=ALL_OPERATIONS,
                using=caller_is_admin,
                check=caller_is_admin,
                scope=admins_only,
            )
        )

    # Users
    registry.register(
        Policy(
            name="Users can view their own profile",
            table="users",
            operations={Operation.SELECT},
            using=owned_by("id"),
            scope=owner_scope(User.id),
        ),
        Policy(
            name="Users can create their own profile",
            table="users",
            operations={Operation.INSERT},
            check=all_of(owned_by("id"), _self_assignable_role),
        ),
        Policy(
            name="Users cannot change their own role",
            table="users",
            operations={Operation.UPDATE},
            using=always,
            check=_role_unchanged,
            permissive=False,
        ),
    )

    # Merchants
    registry.register(
        Policy(
            name="Approved merchants are public",
            table="merchants",
            operations={Operation.SELECT},
            using=_is_approved,
            scope=lambda caller: Merchant.status == MerchantStatus.APPROVED,
        ),
        Policy(
            name="Users can open a store",
            table="merchants",
            operations={Operation.INSERT},
            check=all_of(owned_by("owner_id"), _is_pending),
        ),
        Policy(
            name="Only admins change merchant status",
            table="merchants",
            operations={Operation.UPDATE},
            using=always,
            check=_merchant_status_unchanged,
            permissive=False,
        ),
    )

    # Products & inventory
    registry.register(
        Policy(
            name="Products are visible to everyone",
            table="products",
            operations={Operation.SELECT},
            using=always,
            scope=everyone,
        ),
        Policy(
            name="Merchants can manage their products",
            table="products",
            operations={Operation.INSERT},
            check=_runs_store,
        ),
        Policy(
            name="Merchants can update their products",
            table="products",
            operations={Operation.UPDATE},
            using=_runs_store,
            check=_runs_store,
        ),
        Policy(
            name="Merchants can delete their products",
            table="products",
            operations={Operation.DELETE},
            using=_runs_store,
        ),
        Policy(
            name="Inventory is visible to everyone",
            table="inventory",
            operations={Operation.SELECT},
            using=always,
            scope=everyone,
        ),
        Policy(
            name="Merchants can record stock changes",
            table="inventory",
            operations={Operation.INSERT},
            check=_sells_product,
        ),
    )

    # Orders & order items
    registry.register(
        Policy(
            name="Customers can place orders",
            table="orders",
            operations={Operation.INSERT},
            check=all_of(owned_by("user_id"), _is_pending),
        ),
        Policy(
            name="Merchants can view orders for their store",
            table="orders",
            operations={Operation.SELECT},
            using=_runs_store,
            scope=_store_orders_scope,
        ),
        Policy(
            name="Merchants can update orders for their store",
            table="orders",
            operations={Operation.UPDATE},
            using=_runs_store,
            check=_runs_store,
        ),
        Policy(
            name="Customers can view their order items",
            table="order_items",
            operations={Operation.SELECT},
            using=_placed_order,
        ),
        Policy(
            name="Merchants can view order items for their store",
            table="order_items",
            operations={Operation.SELECT},
            using=_fulfils_order,
        ),
        Policy(
            name="Customers can add items to their orders",
            table="order_items",
            operations={Operation.INSERT},
            check=_placed_order,
        ),
    )

    # Payments
    registry.register(
        Policy(
            name="Customers can view their payments",
            table="payments",
            operations={Operation.SELECT},
            using=owned_by("user_id"),
            scope=owner_scope(Payment.user_id),
        ),
        Policy(
            name="Customers can pay for their orders",
            table="payments",
            operations={Operation.INSERT},
            check=all_of(owned_by("user_id"), _placed_order),
        ),
    )

    # Notifications are created by the platform (admin/service role) only
    registry.register(
        Policy(
            name="Users can view their notifications",
            table="notifications",
            operations={Operation.SELECT},
            using=owned_by("user_id"),
            scope=owner_scope(Notification.user_id),
        ),
        Policy(
            name="Users can update their notifications",
            table="notifications",
            operations={Operation.UPDATE},
            using=owned_by("user_id"),
            check=owned_by("user_id"),
        ),
        Policy(
            name="Users can delete their notifications",
            table="notifications",
            operations={Operation.DELETE},
            using=owned_by("user_id"),
        ),
    )

    # Reference data
    registry.register(
        Policy(
            name="Categories are visible to everyone",
            table="categories",
            operations={Operation.SELECT},
            using=always,
            scope=everyone,
        ),
        Policy(
            name="Coupons are visible to everyone",
            table="coupons",
            operations={Operation.SELECT},
            using=always,
            scope=everyone,
        ),
    )

    return registry
