"""Admin order routes: listing, lookup by voucher, lifecycle and redemption."""

from fastapi import APIRouter, Depends, HTTPException
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.store_service.models import Order
from services.store_service.schemas import (
    OrderAdminDetailResponse,
    OrderAdminResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderStatusResponse,
    OrderStatusUpdate,
    RedeemRequest,
    RedeemResponse,
)
from services.store_service.services import order_service, redemption_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])
logger = get_logger(__name__)


def _detail(order: Order) -> OrderAdminDetailResponse:
    return OrderAdminDetailResponse(
        order=OrderAdminResponse.model_validate(order),
        items=[OrderItemResponse.model_validate(item) for item in order.items],
    )


# ============================================================================
# ORDERS
# ============================================================================


@router.get("/orders/list", response_model=OrderListResponse)
async def list_orders(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """All orders with their items, newest first."""
    orders = await order_service.list_orders(db)
    return OrderListResponse(
        orders=[OrderAdminResponse.model_validate(o) for o in orders]
    )


@router.get("/orders/by-code/{code}", response_model=OrderAdminDetailResponse)
async def get_order_by_code(
    code: str,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Look up an order from a scanned voucher code."""
    order = await order_service.get_order_by_code(db, code)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return _detail(order)


@router.post("/orders/{order_id}/confirm", response_model=OrderStatusResponse)
async def confirm_order(
    order_id: str,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Mark an order as paid and decrement stock."""
    order = await order_service.confirm_order(db, order_id)
    logger.info("Order %s confirmed by %s", order.id, current_user.user_id)
    return OrderStatusResponse(status=order.status)


@router.post("/orders/{order_id}/cancel", response_model=OrderStatusResponse)
async def cancel_order(
    order_id: str,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Cancel an order. Stock is not restored."""
    order = await order_service.cancel_order(db, order_id)
    logger.info("Order %s cancelled by %s", order.id, current_user.user_id)
    return OrderStatusResponse(status=order.status)


@router.post("/orders/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(
    order_id: str,
    status_update: OrderStatusUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Set an order's status directly."""
    order = await order_service.set_order_status(db, order_id, status_update.status)
    return OrderStatusResponse(status=order.status)


# ============================================================================
# REDEMPTION
# ============================================================================


@router.post("/orders/redeem", response_model=RedeemResponse)
async def redeem_order_items(
    request: RedeemRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Redeem purchased quantities at the door."""
    await redemption_service.redeem_items(db, request.order_id, request.items)
    return RedeemResponse()
