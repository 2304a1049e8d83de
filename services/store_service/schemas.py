"""Pydantic schemas for store service.

Request bodies accept the storefront's camelCase keys (``productId``,
``buyerName``) as well as snake_case.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from services.store_service.models import OrderStatus, ProductType, StockType

# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    type: ProductType
    price: int = Field(..., ge=0)
    visible: bool = True
    subtitle: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    payment_link: Optional[str] = Field(None, max_length=500)
    stock_type: StockType = StockType.BOOLEAN
    stock_value: int = Field(1, ge=0)
    stock_initial: Optional[int] = Field(None, ge=0)
    max_per_order: Optional[int] = Field(None, ge=1)
    is_yoga_add_on: bool = False
    stock: Optional[int] = Field(None, ge=0)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    id: int
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[ProductType] = None
    price: Optional[int] = Field(None, ge=0)
    visible: Optional[bool] = None
    subtitle: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    payment_link: Optional[str] = Field(None, max_length=500)
    stock_type: Optional[StockType] = None
    stock_value: Optional[int] = Field(None, ge=0)
    stock_initial: Optional[int] = Field(None, ge=0)
    max_per_order: Optional[int] = Field(None, ge=1)
    is_yoga_add_on: Optional[bool] = None
    stock: Optional[int] = Field(None, ge=0)


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductListResponse(BaseModel):
    products: list[ProductResponse]


class ProductMutationResponse(BaseModel):
    ok: bool = True
    product: ProductResponse


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderLineIn(BaseModel):
    # Optional here so a missing id is reported as a 400 by the service
    product_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("productId", "product_id")
    )
    quantity: Optional[int] = 1


class OrderCreateRequest(BaseModel):
    buyer_name: Optional[str] = Field(
        None,
        max_length=255,
        validation_alias=AliasChoices("buyerName", "buyer_name"),
    )
    buyer_contact: Optional[str] = Field(
        None,
        max_length=255,
        validation_alias=AliasChoices("buyerContact", "buyer_contact"),
    )
    items: Optional[list[OrderLineIn]] = None


class OrderCreateResponse(BaseModel):
    order_id: uuid.UUID = Field(..., serialization_alias="orderId")
    amount: int
    redemption_code: str
    payment_link: str


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: uuid.UUID
    product_id: int
    title_snapshot: str
    unit_price: int
    quantity: int
    redeemed_qty: int


class OrderPublic(BaseModel):
    """Fields a buyer's voucher page may see."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    amount: int
    status: OrderStatus
    redemption_code: str
    created_at: datetime


class OrderDetailResponse(BaseModel):
    order: OrderPublic
    items: list[OrderItemResponse]


class OrderAdminResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    buyer_name: Optional[str] = None
    buyer_contact: Optional[str] = None
    amount: int
    status: OrderStatus
    payment_method: Optional[str] = None
    redemption_code: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    items: list[OrderItemResponse] = []


class OrderAdminDetailResponse(BaseModel):
    order: OrderAdminResponse
    items: list[OrderItemResponse]


class OrderListResponse(BaseModel):
    orders: list[OrderAdminResponse]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderStatusResponse(BaseModel):
    success: bool = True
    status: OrderStatus


# ============================================================================
# REDEMPTION SCHEMAS
# ============================================================================


class RedeemLineIn(BaseModel):
    order_item_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("orderItemId", "order_item_id")
    )
    quantity: Optional[int] = 1


class RedeemRequest(BaseModel):
    order_id: Optional[uuid.UUID] = Field(
        None, validation_alias=AliasChoices("orderId", "order_id")
    )
    items: Optional[list[RedeemLineIn]] = None


class RedeemResponse(BaseModel):
    ok: bool = True


# ============================================================================
# ADMIN ROLE SCHEMAS
# ============================================================================


class CheckAdminResponse(BaseModel):
    is_admin: bool = Field(..., serialization_alias="isAdmin")
    success: bool = True


class MakeAdminRequest(BaseModel):
    user_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("userId", "user_id")
    )


class MakeAdminResponse(BaseModel):
    success: bool = True
    user_id: str
