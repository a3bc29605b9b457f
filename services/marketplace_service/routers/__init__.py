"""Marketplace service routers package."""

from services.marketplace_service.routers.accounts import router as accounts_router
from services.marketplace_service.routers.catalog import router as catalog_router
from services.marketplace_service.routers.engagement import (
    router as engagement_router,
)
from services.marketplace_service.routers.merchants import router as merchants_router
from services.marketplace_service.routers.orders import router as orders_router

__all__ = [
    "accounts_router",
    "catalog_router",
    "engagement_router",
    "merchants_router",
    "orders_router",
]
