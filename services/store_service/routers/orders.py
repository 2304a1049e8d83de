"""Public order routes: checkout and the buyer's voucher lookup."""

from fastapi import APIRouter, Depends, HTTPException
from libs.db.session import get_async_db
from services.store_service.schemas import (
    OrderCreateRequest,
    OrderCreateResponse,
    OrderDetailResponse,
    OrderItemResponse,
    OrderPublic,
)
from services.store_service.services import order_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post(
    "/orders/create",
    response_model=OrderCreateResponse,
    response_model_by_alias=True,
)
async def create_order(
    request: OrderCreateRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Validate the cart, commit stock and return the payment link."""
    created = await order_service.create_order(
        db,
        items=request.items,
        buyer_name=request.buyer_name,
        buyer_contact=request.buyer_contact,
    )
    return OrderCreateResponse(
        order_id=created.order.id,
        amount=created.order.amount,
        redemption_code=created.order.redemption_code,
        payment_link=created.payment_link,
    )


# ============================================================================
# VOUCHER
# ============================================================================


@router.get("/orders/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_async_db),
):
    """Order summary and lines for the buyer's voucher page."""
    order = await order_service.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    return OrderDetailResponse(
        order=OrderPublic.model_validate(order),
        items=[OrderItemResponse.model_validate(item) for item in order.items],
    )
