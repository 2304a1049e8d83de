"""Store catalog models: tickets and merchandise."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.enums import ProductType, StockType, enum_values
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column


class Product(Base):
    """A ticket or merchandise item sold through the storefront."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subtitle: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, index=True
    )

    type: Mapped[ProductType] = mapped_column(
        SAEnum(ProductType, values_callable=enum_values, name="product_type_enum"),
        nullable=False,
    )
    # Whole currency units, no minor unit
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    visible: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="1", nullable=False
    )
    payment_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Stock policy
    stock_type: Mapped[StockType] = mapped_column(
        SAEnum(StockType, values_callable=enum_values, name="product_stock_type_enum"),
        default=StockType.BOOLEAN,
        nullable=False,
    )
    stock_value: Mapped[int] = mapped_column(
        Integer, default=1, server_default="1", nullable=False
    )  # remaining count, or 0/1 availability flag
    stock_initial: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_per_order: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Legacy globally-capped add-on; ``stock`` is its cap
    is_yoga_add_on: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="0", nullable=False
    )
    stock: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("stock_value >= 0", name="product_stock_non_negative"),
        CheckConstraint("price >= 0", name="product_price_non_negative"),
        CheckConstraint(
            "max_per_order IS NULL OR max_per_order > 0",
            name="product_max_per_order_positive",
        ),
    )

    def __repr__(self):
        return f"<Product {self.id} {self.title!r} stock={self.stock_value}>"
