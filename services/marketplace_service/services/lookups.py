"""Cross-table queries used by policy predicates.

These read the database directly (they are part of the authorization
decision, not subject to it), the same way a Postgres policy's EXISTS
subquery runs with the policy owner's rights.
"""

import uuid
from typing import Optional

from services.marketplace_service.models import (
    Merchant,
    MerchantStatus,
    Order,
    OrderItem,
    Product,
)
from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession


class MarketplaceLookups:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _exists(self, condition) -> bool:
        result = await self.db.execute(select(exists().where(condition)))
        return bool(result.scalar())

    async def has_ordered_product(
        self, user_id: uuid.UUID, product_id: Optional[uuid.UUID]
    ) -> bool:
        """True if an order placed by ``user_id`` contains ``product_id``.

        Joins order_items to orders on the order's customer (orders.user_id).
        """
        if product_id is None:
            return False
        query = (
            select(OrderItem.id)
            .join(Order, OrderItem.order_id == Order.id)
            .where(OrderItem.product_id == product_id, Order.user_id == user_id)
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.first() is not None

    async def owns_merchant(
        self, user_id: uuid.UUID, merchant_id: Optional[uuid.UUID]
    ) -> bool:
        if merchant_id is None:
            return False
        return await self._exists(
            (Merchant.id == merchant_id) & (Merchant.owner_id == user_id)
        )

    async def owns_product(
        self, user_id: uuid.UUID, product_id: Optional[uuid.UUID]
    ) -> bool:
        """True if ``product_id`` belongs to a store owned by ``user_id``."""
        if product_id is None:
            return False
        query = (
            select(Product.id)
            .join(Merchant, Product.merchant_id == Merchant.id)
            .where(Product.id == product_id, Merchant.owner_id == user_id)
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.first() is not None

    async def owns_order(
        self, user_id: uuid.UUID, order_id: Optional[uuid.UUID]
    ) -> bool:
        if order_id is None:
            return False
        return await self._exists((Order.id == order_id) & (Order.user_id == user_id))

    async def sells_order(
        self, user_id: uuid.UUID, order_id: Optional[uuid.UUID]
    ) -> bool:
        """True if ``order_id`` was placed with a store owned by ``user_id``."""
        if order_id is None:
            return False
        query = (
            select(Order.id)
            .join(Merchant, Order.merchant_id == Merchant.id)
            .where(Order.id == order_id, Merchant.owner_id == user_id)
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.first() is not None

    async def merchant_status(
        self, merchant_id: Optional[uuid.UUID]
    ) -> Optional[MerchantStatus]:
        if merchant_id is None:
            return None
        result = await self.db.execute(
            select(Merchant.status).where(Merchant.id == merchant_id)
        )
        return result.scalar_one_or_none()
