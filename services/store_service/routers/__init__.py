"""Store service routers package."""

from services.store_service.routers.admin import router as admin_router
from services.store_service.routers.admin_orders import router as admin_orders_router
from services.store_service.routers.catalog import router as catalog_router
from services.store_service.routers.orders import router as orders_router

__all__ = [
    "admin_orders_router",
    "admin_router",
    "catalog_router",
    "orders_router",
]
