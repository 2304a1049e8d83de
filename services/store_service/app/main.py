"""FastAPI application for the biomechanics.wav store service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.store_service.routers import (
    admin_orders_router,
    admin_router,
    catalog_router,
    orders_router,
)


def create_app() -> FastAPI:
    """Create and configure the store service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title=f"{settings.SITE_NAME} Store Service",
        version="0.1.0",
        description="Orders, stock commitment and door redemption for the link-in-bio storefront.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Every error leaves as {"error": ...}
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    # Admin order routes first: /orders/list must win over /orders/{order_id}
    app.include_router(admin_orders_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(catalog_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    return app


app = create_app()
