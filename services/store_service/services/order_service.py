"""Order intake and lifecycle: cart validation, stock caps, confirm/cancel.

Stock commitment is checked and written in one transaction while holding
both the product row locks (``SELECT ... FOR UPDATE``) and the in-process
per-product locks, so two checkouts for the last unit cannot both pass the
check. Stock decrements on confirm are single conditional UPDATEs floored at
zero. Emails go out after commit and never affect order state.
"""

import uuid
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.emails.store import send_order_status_email, send_order_summary_email
from libs.common.locks import KeyedLocks, product_locks
from libs.common.logging import get_logger
from services.store_service.models import (
    Order,
    OrderItem,
    OrderStatus,
    Product,
    StockType,
)
from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

order_locks = KeyedLocks()


@dataclass
class CartLine:
    product_id: int
    quantity: int


@dataclass
class CreatedOrder:
    order: Order
    items: list[OrderItem]
    payment_link: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")


def line_field(line: Any, *names: str) -> Any:
    """First non-None value among ``names`` on a dict or object cart line."""
    for name in names:
        value = line.get(name) if isinstance(line, dict) else getattr(line, name, None)
        if value is not None:
            return value
    return None


def clamp_quantity(raw: Any) -> int:
    """Quantities below 1 (or missing) count as 1."""
    try:
        qty = int(raw or 1)
    except (TypeError, ValueError):
        raise _bad_request(f"Invalid quantity: {raw!r}")
    return max(1, qty)


def parse_cart(items: Optional[Iterable[Any]]) -> list[CartLine]:
    """Turn raw cart lines into ``CartLine`` objects, rejecting malformed input."""
    items = list(items or [])
    if not items:
        raise _bad_request("items are required")

    lines = []
    for line in items:
        product_id = line_field(line, "product_id", "productId")
        if product_id is None:
            raise _bad_request("Each item must include productId")
        try:
            product_id = int(product_id)
        except (TypeError, ValueError):
            raise _bad_request(f"Invalid productId: {product_id!r}")
        lines.append(CartLine(product_id, clamp_quantity(line_field(line, "quantity"))))
    return lines


def build_payment_link(total: int) -> str:
    base = get_settings().PAYMENT_LINK_BASE_URL.rstrip("/")
    return f"{base}/{total}"


def email_items(items: Iterable[OrderItem]) -> list[dict]:
    return [
        {"title": item.title_snapshot, "quantity": item.quantity, "unit_price": item.unit_price}
        for item in items
    ]


async def committed_quantities(
    db: AsyncSession, product_ids: Iterable[int]
) -> dict[int, int]:
    """Sum of purchased quantity per product across every existing order line."""
    product_ids = list(product_ids)
    if not product_ids:
        return {}
    result = await db.execute(
        select(OrderItem.product_id, func.coalesce(func.sum(OrderItem.quantity), 0))
        .where(OrderItem.product_id.in_(product_ids))
        .group_by(OrderItem.product_id)
    )
    return {product_id: int(total) for product_id, total in result.all()}


def check_cart_against_catalog(
    lines: list[CartLine],
    products: dict[int, Product],
) -> dict[int, int]:
    """Per-line catalog rules. Returns the requested quantity per product."""
    requested: dict[int, int] = defaultdict(int)
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            raise _bad_request(f"Product {line.product_id} does not exist")
        if product.stock_type == StockType.BOOLEAN and not product.stock_value:
            raise _bad_request(f"{product.title} is not available")
        requested[line.product_id] += line.quantity

    for product_id, qty in requested.items():
        product = products[product_id]
        if product.max_per_order is not None and qty > product.max_per_order:
            raise _bad_request(
                f"Maximum {product.max_per_order} per order for {product.title}"
            )
    return dict(requested)


def check_stock_caps(
    requested: dict[int, int],
    products: dict[int, Product],
    committed: dict[int, int],
) -> None:
    """Reject the cart if any product would be committed past its cap."""
    yoga_default_cap = get_settings().YOGA_ADD_ON_CAP
    for product_id, qty in requested.items():
        product = products[product_id]
        used = committed.get(product_id, 0)

        if product.stock_type == StockType.QUANTITY:
            if used + qty > product.stock_value:
                remaining = max(0, product.stock_value - used)
                raise _bad_request(
                    f"Not enough stock for {product.title}: {remaining} remaining"
                )

        if product.is_yoga_add_on:
            cap = product.stock if product.stock is not None else yoga_default_cap
            if used + qty > cap:
                raise _bad_request(
                    f"{product.title} sold out or insufficient (cap={cap})"
                )


# ---------------------------------------------------------------------------
# Order intake
# ---------------------------------------------------------------------------


async def create_order(
    db: AsyncSession,
    *,
    items: Optional[Iterable[Any]],
    buyer_name: Optional[str] = None,
    buyer_contact: Optional[str] = None,
) -> CreatedOrder:
    """Validate a cart against the catalog and persist the order with its lines.

    All validation happens before any write; the order and its items are
    committed together.
    """
    lines = parse_cart(items)
    product_ids = sorted({line.product_id for line in lines})

    async with product_locks.hold(product_ids):
        try:
            result = await db.execute(
                select(Product)
                .where(Product.id.in_(product_ids))
                .order_by(Product.id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            products = {p.id: p for p in result.scalars().all()}

            requested = check_cart_against_catalog(lines, products)
            capped = [
                pid
                for pid in requested
                if products[pid].stock_type == StockType.QUANTITY
                or products[pid].is_yoga_add_on
            ]
            committed = await committed_quantities(db, capped)
            check_stock_caps(requested, products, committed)

            total = sum(products[line.product_id].price * line.quantity for line in lines)
            order_items = [
                OrderItem(
                    product_id=line.product_id,
                    title_snapshot=products[line.product_id].title,
                    unit_price=products[line.product_id].price,
                    quantity=line.quantity,
                    redeemed_qty=0,
                )
                for line in lines
            ]
            order = Order(
                buyer_name=buyer_name,
                buyer_contact=buyer_contact,
                amount=total,
                status=OrderStatus.CREATED,
                payment_method=get_settings().PAYMENT_METHOD,
                redemption_code=Order.generate_redemption_code(),
                items=order_items,
            )
            db.add(order)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info(
        "Created order %s amount=%d lines=%d", order.id, order.amount, len(order_items)
    )

    if buyer_contact and "@" in buyer_contact:
        try:
            await send_order_summary_email(
                buyer_contact,
                buyer_name or "Usuario",
                str(order.id),
                email_items(order_items),
                total,
            )
        except Exception as e:
            # Never fail the order because of email
            logger.error(f"Failed to send order summary email for {order.id}: {e}")

    return CreatedOrder(order=order, items=order_items, payment_link=build_payment_link(total))


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def parse_order_id(raw: Any) -> Optional[uuid.UUID]:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        return None


async def get_order(
    db: AsyncSession, order_id: Any, *, for_update: bool = False
) -> Optional[Order]:
    """Load an order with its items, or None if the id does not resolve."""
    parsed = parse_order_id(order_id)
    if parsed is None:
        return None
    query = (
        select(Order)
        .where(Order.id == parsed)
        .options(selectinload(Order.items))
        .execution_options(populate_existing=True)
    )
    if for_update:
        query = query.with_for_update(of=Order)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_order_by_code(db: AsyncSession, redemption_code: str) -> Optional[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.redemption_code == redemption_code)
        .options(selectinload(Order.items))
    )
    return result.scalar_one_or_none()


async def list_orders(db: AsyncSession) -> list[Order]:
    """All orders with their items, newest first."""
    result = await db.execute(
        select(Order).options(selectinload(Order.items)).order_by(Order.created_at.desc())
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


async def _notify_status(order: Order, kind: str) -> None:
    if not order.buyer_contact:
        return
    try:
        await send_order_status_email(
            order.buyer_contact,
            order.buyer_name or "Usuario",
            str(order.id),
            kind,
            email_items(order.items),
            order.amount,
        )
    except Exception as e:
        logger.error(f"Failed to send {kind} email for order {order.id}: {e}")


async def decrement_stock(db: AsyncSession, product_id: int, quantity: int) -> None:
    """Subtract from a quantity-tracked product's stock, never going below zero."""
    await db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock_type == StockType.QUANTITY)
        .values(
            stock_value=case(
                (Product.stock_value > quantity, Product.stock_value - quantity),
                else_=0,
            )
        )
        .execution_options(synchronize_session=False)
    )


async def confirm_order(db: AsyncSession, order_id: Any) -> Order:
    """Mark an order paid and take its quantities out of stock.

    Confirming an order that is already paid is a no-op.
    """
    parsed = parse_order_id(order_id)
    if parsed is None:
        raise _not_found()

    async with order_locks.hold([parsed]):
        try:
            order = await get_order(db, parsed, for_update=True)
            if not order:
                raise _not_found()

            if order.status == OrderStatus.PAID:
                logger.info("Order %s already paid, skipping confirm", order.id)
                await db.commit()
                return order
            if order.status == OrderStatus.CANCELLED:
                raise _bad_request("Cancelled orders cannot be confirmed")

            quantities: dict[int, int] = defaultdict(int)
            for item in order.items:
                quantities[item.product_id] += item.quantity
            for product_id, qty in sorted(quantities.items()):
                await decrement_stock(db, product_id, qty)

            order.status = OrderStatus.PAID
            order.paid_at = utc_now()
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info("Confirmed order %s", order.id)
    await _notify_status(order, "confirmed")
    return order


async def cancel_order(db: AsyncSession, order_id: Any) -> Order:
    """Mark an order cancelled. Stock is not restored."""
    parsed = parse_order_id(order_id)
    if parsed is None:
        raise _not_found()

    async with order_locks.hold([parsed]):
        try:
            order = await get_order(db, parsed, for_update=True)
            if not order:
                raise _not_found()

            if order.status == OrderStatus.CANCELLED:
                await db.commit()
                return order

            order.status = OrderStatus.CANCELLED
            order.cancelled_at = utc_now()
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info("Cancelled order %s", order.id)
    await _notify_status(order, "cancelled")
    return order


async def set_order_status(
    db: AsyncSession, order_id: Any, new_status: OrderStatus
) -> Order:
    """Admin override: set the status directly, without stock or email side effects."""
    parsed = parse_order_id(order_id)
    if parsed is None:
        raise _not_found()

    async with order_locks.hold([parsed]):
        try:
            order = await get_order(db, parsed, for_update=True)
            if not order:
                raise _not_found()
            old_status = order.status
            order.status = new_status
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info("Order %s status %s -> %s", order.id, old_status.value, new_status.value)
    return order
