"""Core policy set: the row-level security created by migration 0002.

One policy per statement in that migration. Tables listed in
``CORE_RLS_TABLES`` without a policy here (products, payments,
notifications) are locked for every caller until another policy set grants
access.
"""

from services.marketplace_service.models import (
    Address,
    Merchant,
    Order,
    Review,
    User,
    Wishlist,
)
from services.marketplace_service.policies.engine import (
    Operation,
    Policy,
    PolicyContext,
    PolicyRegistry,
    Row,
)
from services.marketplace_service.policies.predicates import (
    all_of,
    always,
    everyone,
    owned_by,
    owner_scope,
    rating_in_bounds,
)

CORE_RLS_TABLES = (
    "users",
    "merchants",
    "orders",
    "products",
    "payments",
    "wishlist",
    "notifications",
    "addresses",
    "reviews",
)


def has_ordered_product(ctx: PolicyContext, row: Row):
    """The caller placed an order containing ``row.product_id``."""
    return ctx.lookups.has_ordered_product(ctx.caller.user_id, row.get("product_id"))


def core_registry() -> PolicyRegistry:
    registry = PolicyRegistry().enable_rls(*CORE_RLS_TABLES)

    # Users can only update their own profile
    registry.register(
        Policy(
            name="Users can update their own profile",
            table="users",
            operations={Operation.UPDATE},
            using=owned_by("id"),
            check=owned_by("id"),
            scope=owner_scope(User.id),
        )
    )

    # Merchants can only view and manage their own store
    store_owner = owned_by("owner_id")
    registry.register(
        Policy(
            name="Merchants can view their store",
            table="merchants",
            operations={Operation.SELECT},
            using=store_owner,
            scope=owner_scope(Merchant.owner_id),
        ),
        Policy(
            name="Merchants can update their store",
            table="merchants",
            operations={Operation.UPDATE},
            using=store_owner,
            check=store_owner,
        ),
        Policy(
            name="Merchants can delete their store",
            table="merchants",
            operations={Operation.DELETE},
            using=store_owner,
        ),
    )

    # Customers can only view their own orders
    registry.register(
        Policy(
            name="Customers can view their orders",
            table="orders",
            operations={Operation.SELECT},
            using=owned_by("user_id"),
            scope=owner_scope(Order.user_id),
        )
    )

    # Customers can only see and change their own wishlist
    registry.register(
        Policy(
            name="Customers can manage their wishlist",
            table="wishlist",
            operations={Operation.SELECT},
            using=owned_by("user_id"),
            scope=owner_scope(Wishlist.user_id),
        ),
        Policy(
            name="Customers can add to wishlist",
            table="wishlist",
            operations={Operation.INSERT},
            check=owned_by("user_id"),
        ),
        Policy(
            name="Customers can remove from wishlist",
            table="wishlist",
            operations={Operation.DELETE},
            using=owned_by("user_id"),
        ),
    )

    # Customers can manage their addresses
    registry.register(
        Policy(
            name="Customers can manage their addresses",
            table="addresses",
            operations={Operation.SELECT},
            using=owned_by("user_id"),
            scope=owner_scope(Address.user_id),
        ),
        Policy(
            name="Customers can add an address",
            table="addresses",
            operations={Operation.INSERT},
            check=owned_by("user_id"),
        ),
        Policy(
            name="Customers can update their address",
            table="addresses",
            operations={Operation.UPDATE},
            using=owned_by("user_id"),
            check=owned_by("user_id"),
        ),
        Policy(
            name="Customers can delete their address",
            table="addresses",
            operations={Operation.DELETE},
            using=owned_by("user_id"),
        ),
    )

    # Reviews are public; authors must have ordered the product
    registry.register(
        Policy(
            name="Users can view all reviews",
            table="reviews",
            operations={Operation.SELECT},
            using=always,
            scope=everyone,
        ),
        Policy(
            name="Users can insert their own reviews",
            table="reviews",
            operations={Operation.INSERT},
            check=all_of(owned_by("user_id"), rating_in_bounds, has_ordered_product),
        ),
        Policy(
            name="Users can update their own reviews",
            table="reviews",
            operations={Operation.UPDATE},
            using=owned_by("user_id"),
            check=all_of(owned_by("user_id"), rating_in_bounds),
            scope=owner_scope(Review.user_id),
        ),
        Policy(
            name="Users can delete their own reviews",
            table="reviews",
            operations={Operation.DELETE},
            using=owned_by("user_id"),
        ),
    )

    return registry
