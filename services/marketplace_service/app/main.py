"""FastAPI application for the Marketplace Service."""

from fastapi import FastAPI
from libs.common.config import get_settings
from libs.common.logging import configure_logging, get_logger
from services.marketplace_service.routers import (
    accounts_router,
    catalog_router,
    engagement_router,
    merchants_router,
    orders_router,
)

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the Marketplace Service FastAPI app."""
    configure_logging()
    settings = get_settings()

    app = FastAPI(
        title="KnitKits Marketplace Service",
        version="0.1.0",
        description=(
            "Marketplace data access for customers, merchants and admins, "
            "gated by row-level policies."
        ),
    )

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "marketplace"}

    app.include_router(accounts_router, prefix="/marketplace")
    app.include_router(merchants_router, prefix="/marketplace")
    app.include_router(catalog_router, prefix="/marketplace")
    app.include_router(orders_router, prefix="/marketplace")
    app.include_router(engagement_router, prefix="/marketplace")

    logger.info(
        "Marketplace service started with policy sets: %s",
        ", ".join(settings.RLS_POLICY_SETS),
    )
    return app


app = create_app()
