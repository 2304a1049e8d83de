"""Store commerce models: orders and their line items."""

import secrets
import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.enums import OrderStatus, enum_values
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Order(Base):
    """A buyer's checkout: line items plus a lifecycle status."""

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # Buyer (anonymous checkout, contact is usually an email)
    buyer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    buyer_contact: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(OrderStatus, values_callable=enum_values, name="order_status_enum"),
        default=OrderStatus.CREATED,
        server_default="created",
        nullable=False,
        index=True,
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    redemption_code: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (CheckConstraint("amount >= 0", name="order_amount_non_negative"),)

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    @staticmethod
    def generate_redemption_code() -> str:
        """Random opaque voucher token shown to the buyer and scanned at the door."""
        return secrets.token_urlsafe(24)

    def __repr__(self):
        return f"<Order {self.id} status={self.status}>"


class OrderItem(Base):
    """One purchased line, frozen at purchase time."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Plain reference: product edits or deletes never touch past lines
    product_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    title_snapshot: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    redeemed_qty: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="order_item_positive_quantity"),
        CheckConstraint(
            "redeemed_qty >= 0 AND redeemed_qty <= quantity",
            name="order_item_valid_redeemed",
        ),
    )

    # Relationships
    order = relationship("Order", back_populates="items")

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    def __repr__(self):
        return f"<OrderItem product={self.product_id} qty={self.quantity} redeemed={self.redeemed_qty}>"
