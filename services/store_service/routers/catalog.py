"""Store catalog router: public product list and admin product management."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.schemas import (
    ProductCreate,
    ProductListResponse,
    ProductMutationResponse,
    ProductResponse,
    ProductUpdate,
)
from services.store_service.services import catalog_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


# ============================================================================
# PUBLIC CATALOG
# ============================================================================


@router.get("/products/list", response_model=ProductListResponse)
async def list_products(
    db: AsyncSession = Depends(get_async_db),
):
    """List visible products grouped by category."""
    products = await catalog_service.list_products(db, visible_only=True)
    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in products]
    )


# ============================================================================
# ADMIN PRODUCT MANAGEMENT
# ============================================================================


@router.post("/products/create", response_model=ProductMutationResponse)
async def create_product(
    product_data: ProductCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a new product (admin only)."""
    product = await catalog_service.create_product(db, product_data.model_dump())
    return ProductMutationResponse(product=ProductResponse.model_validate(product))


@router.post("/products/update", response_model=ProductMutationResponse)
async def update_product(
    product_data: ProductUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Update a product (admin only). Only the fields sent are changed."""
    changes = product_data.model_dump(exclude_unset=True, exclude={"id"})
    product = await catalog_service.update_product(db, product_data.id, changes)
    return ProductMutationResponse(product=ProductResponse.model_validate(product))
