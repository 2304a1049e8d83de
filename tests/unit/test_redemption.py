"""Unit tests for the redemption ledger."""

import asyncio
import uuid

import pytest
from fastapi import HTTPException
from services.store_service.models import OrderItem
from services.store_service.services.redemption_service import (
    redeem_items,
    requested_redemptions,
)
from sqlalchemy import select
from tests.factories import ProductFactory, make_order


async def _order_with_lines(db, *quantities):
    products = [ProductFactory.create() for _ in quantities]
    db.add_all(products)
    await db.commit()
    order = await make_order(db, list(zip(products, quantities)))
    return order, [item.id for item in order.items]


async def _redeemed(db, item_id) -> int:
    result = await db.execute(
        select(OrderItem.redeemed_qty).where(OrderItem.id == item_id)
    )
    return result.scalar_one()


@pytest.mark.unit
def test_requested_redemptions_sums_duplicates():
    assert requested_redemptions(
        [
            {"orderItemId": 7, "quantity": 1},
            {"order_item_id": 7, "quantity": 2},
            {"orderItemId": 9},
        ]
    ) == {7: 3, 9: 1}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_updates_lines(db_session):
    order, (first, second) = await _order_with_lines(db_session, 3, 1)

    await redeem_items(
        db_session,
        order.id,
        [{"orderItemId": first, "quantity": 2}, {"orderItemId": second, "quantity": 1}],
    )

    assert await _redeemed(db_session, first) == 2
    assert await _redeemed(db_session, second) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_more_than_purchased_rejected(db_session):
    order, (item_id,) = await _order_with_lines(db_session, 1)
    order_id = order.id

    with pytest.raises(HTTPException) as exc:
        await redeem_items(db_session, order_id, [{"orderItemId": item_id, "quantity": 2}])
    assert exc.value.status_code == 400
    assert await _redeemed(db_session, item_id) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_batch_is_all_or_nothing(db_session):
    order, (ok_item, full_item) = await _order_with_lines(db_session, 2, 1)
    order_id = order.id

    with pytest.raises(HTTPException):
        await redeem_items(
            db_session,
            order_id,
            [{"orderItemId": ok_item, "quantity": 1}, {"orderItemId": full_item, "quantity": 2}],
        )
    assert await _redeemed(db_session, ok_item) == 0
    assert await _redeemed(db_session, full_item) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_duplicate_lines_count_together(db_session):
    order, (item_id,) = await _order_with_lines(db_session, 2)
    order_id = order.id

    with pytest.raises(HTTPException):
        await redeem_items(
            db_session,
            order_id,
            [{"orderItemId": item_id, "quantity": 2}, {"orderItemId": item_id, "quantity": 1}],
        )
    assert await _redeemed(db_session, item_id) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_item_from_other_order_rejected(db_session):
    order, _ = await _order_with_lines(db_session, 1)
    _, (foreign_item,) = await _order_with_lines(db_session, 1)
    order_id = order.id

    with pytest.raises(HTTPException) as exc:
        await redeem_items(db_session, order_id, [{"orderItemId": foreign_item}])
    assert exc.value.status_code == 400
    assert "does not belong" in exc.value.detail


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_empty_payload_rejected(db_session):
    with pytest.raises(HTTPException) as exc:
        await redeem_items(db_session, uuid.uuid4(), [])
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await redeem_items(db_session, None, [{"orderItemId": 1}])
    assert exc.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeemed_never_exceeds_quantity_over_many_calls(db_session):
    order, (item_id,) = await _order_with_lines(db_session, 3)
    order_id = order.id

    outcomes = []
    for qty in (1, 2, 1, 1):
        try:
            await redeem_items(db_session, order_id, [{"orderItemId": item_id, "quantity": qty}])
            outcomes.append(True)
        except HTTPException:
            outcomes.append(False)

    assert outcomes == [True, True, False, False]
    assert await _redeemed(db_session, item_id) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_concurrent_redemptions_of_last_unit(db_session, session_factory):
    order, (item_id,) = await _order_with_lines(db_session, 1)
    order_id = order.id

    async def attempt():
        async with session_factory() as session:
            try:
                await redeem_items(session, order_id, [{"orderItemId": item_id}])
                return True
            except HTTPException:
                return False

    results = await asyncio.gather(attempt(), attempt())

    assert sorted(results) == [False, True]
    assert await _redeemed(db_session, item_id) == 1


@pytest.mark.unit
def test_requested_redemptions_accepts_both_key_styles():
    requested = requested_redemptions(
        [{"orderItemId": 1, "quantity": 2}, {"order_item_id": 1}, {"orderItemId": 2, "quantity": 0}]
    )
    assert requested == {1: 3, 2: 1}
