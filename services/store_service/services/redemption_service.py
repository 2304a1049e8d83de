"""Door-side redemption of purchased order lines."""

import uuid
from collections import defaultdict
from collections.abc import Iterable
from typing import Any, Optional

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from services.store_service.models import OrderItem
from services.store_service.services.order_service import (
    clamp_quantity,
    line_field,
    order_locks,
)
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def requested_redemptions(lines: Iterable[Any]) -> dict[int, int]:
    """Sum requested quantity per order item; duplicate lines add up."""
    requested: dict[int, int] = defaultdict(int)
    for line in lines:
        item_id = line_field(line, "order_item_id", "orderItemId")
        if item_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Each item must include orderItemId",
            )
        requested[int(item_id)] += clamp_quantity(line_field(line, "quantity"))
    return dict(requested)


async def redeem_items(
    db: AsyncSession,
    order_id: Optional[uuid.UUID],
    items: Optional[Iterable[Any]],
) -> None:
    """Mark quantities of an order's lines as redeemed.

    The whole batch is validated before anything is written, and every write
    re-checks ``redeemed_qty + n <= quantity`` in SQL. If any line loses a race
    the batch is rolled back.
    """
    items = list(items or [])
    if order_id is None or not items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload"
        )

    requested = requested_redemptions(items)

    async with order_locks.hold([order_id]):
        try:
            result = await db.execute(
                select(OrderItem)
                .where(OrderItem.order_id == order_id, OrderItem.id.in_(list(requested)))
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            current = {item.id: item for item in result.scalars().all()}

            for item_id, qty in requested.items():
                item = current.get(item_id)
                if item is None:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Item {item_id} does not belong to this order",
                    )
                if item.redeemed_qty + qty > item.quantity:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=(
                            f"Quantity exceeds purchased amount for item {item_id} "
                            f"({item.quantity - item.redeemed_qty} left)"
                        ),
                    )

            for item_id, qty in sorted(requested.items()):
                written = await db.execute(
                    update(OrderItem)
                    .where(
                        OrderItem.id == item_id,
                        OrderItem.order_id == order_id,
                        OrderItem.redeemed_qty + qty <= OrderItem.quantity,
                    )
                    .values(redeemed_qty=OrderItem.redeemed_qty + qty)
                    .execution_options(synchronize_session=False)
                )
                if written.rowcount != 1:
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail=f"Item {item_id} was redeemed concurrently, retry",
                    )

            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info(
        "Redeemed order %s: %s",
        order_id,
        ", ".join(f"item {item_id} x{qty}" for item_id, qty in sorted(requested.items())),
    )
