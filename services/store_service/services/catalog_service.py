"""Product catalog reads and admin writes."""

from typing import Any, Optional

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from services.store_service.models import Product, ProductType, StockType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

_PRODUCT_FIELDS = {
    "title",
    "type",
    "price",
    "visible",
    "subtitle",
    "description",
    "category",
    "payment_link",
    "stock_type",
    "stock_value",
    "stock_initial",
    "max_per_order",
    "is_yoga_add_on",
    "stock",
}


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def normalize_product_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Validate product attributes and apply stock normalisation.

    - ``title`` required and trimmed
    - ``type`` must be ticket or item
    - ``price`` must be a non-negative number (stored as whole units)
    - boolean stock collapses ``stock_value`` to 0/1
    - quantity stock defaults ``stock_initial`` to ``stock_value``
    """
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise _bad_request("title is required")
    data["title"] = title.strip()

    try:
        data["type"] = ProductType(data.get("type"))
    except ValueError:
        raise _bad_request("type must be 'ticket' or 'item'")

    price = data.get("price")
    if isinstance(price, bool) or not isinstance(price, (int, float)) or price != price:
        raise _bad_request("price must be a number")
    if price < 0:
        raise _bad_request("price must not be negative")
    data["price"] = int(price)

    try:
        data["stock_type"] = StockType(data.get("stock_type") or StockType.BOOLEAN)
    except ValueError:
        raise _bad_request("stock_type must be 'boolean' or 'quantity'")

    stock_value = data.get("stock_value")
    if stock_value is None:
        stock_value = 1
    if stock_value < 0:
        raise _bad_request("stock_value must not be negative")

    if data["stock_type"] == StockType.BOOLEAN:
        data["stock_value"] = 1 if stock_value else 0
    else:
        data["stock_value"] = int(stock_value)
        if data.get("stock_initial") is None:
            data["stock_initial"] = data["stock_value"]

    max_per_order = data.get("max_per_order")
    if max_per_order is not None and max_per_order < 1:
        raise _bad_request("max_per_order must be a positive integer")

    return data


async def list_products(db: AsyncSession, visible_only: bool = True) -> list[Product]:
    """List products ordered by category (uncategorised last), then id."""
    query = select(Product)
    if visible_only:
        query = query.where(Product.visible.is_(True))
    query = query.order_by(Product.category.is_(None), Product.category, Product.id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    result = await db.execute(select(Product).where(Product.id == product_id))
    return result.scalar_one_or_none()


async def create_product(db: AsyncSession, data: dict[str, Any]) -> Product:
    """Create a product after validating and normalising its fields."""
    fields = normalize_product_fields(
        {k: v for k, v in data.items() if k in _PRODUCT_FIELDS}
    )
    product = Product(**fields)
    db.add(product)
    await db.commit()
    await db.refresh(product)

    logger.info(
        "Created product %s (%s, price=%d, stock=%s:%d)",
        product.id,
        product.type.value,
        product.price,
        product.stock_type.value,
        product.stock_value,
    )
    return product


async def update_product(
    db: AsyncSession, product_id: int, changes: dict[str, Any]
) -> Product:
    """Apply a partial update; the merged state goes through the same validation."""
    product = await get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    merged = {field: getattr(product, field) for field in _PRODUCT_FIELDS}
    merged.update({k: v for k, v in changes.items() if k in _PRODUCT_FIELDS})
    fields = normalize_product_fields(merged)

    for field, value in fields.items():
        setattr(product, field, value)

    await db.commit()
    await db.refresh(product)

    logger.info("Updated product %s fields=%s", product.id, sorted(changes))
    return product
