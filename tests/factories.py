"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(stock_type=StockType.QUANTITY, stock_value=5)
    db_session.add(product)
    await db_session.commit()
"""

import secrets
import uuid
from datetime import datetime, timezone

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


# ---------------------------------------------------------------------------
# Store Service
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Product, ProductType, StockType

        defaults = {
            "title": f"Entrada General {uuid.uuid4().hex[:4]}",
            "type": ProductType.TICKET,
            "price": 10000,
            "visible": True,
            "category": "tickets",
            "stock_type": StockType.BOOLEAN,
            "stock_value": 1,
            "is_yoga_add_on": False,
        }
        defaults.update(overrides)
        return Product(**defaults)

    @staticmethod
    def quantity(stock_value: int = 10, **overrides):
        from services.store_service.models import StockType

        defaults = {
            "stock_type": StockType.QUANTITY,
            "stock_value": stock_value,
            "stock_initial": stock_value,
        }
        defaults.update(overrides)
        return ProductFactory.create(**defaults)


class OrderFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Order, OrderStatus

        defaults = {
            "id": _uuid(),
            "buyer_name": "Test Buyer",
            "buyer_contact": _unique_email(),
            "amount": 0,
            "status": OrderStatus.CREATED,
            "payment_method": "fintoc_tpp",
            "redemption_code": secrets.token_urlsafe(24),
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Order(**defaults)


class OrderItemFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import OrderItem

        defaults = {
            "product_id": 1,
            "title_snapshot": "Entrada General",
            "unit_price": 10000,
            "quantity": 1,
            "redeemed_qty": 0,
        }
        defaults.update(overrides)
        return OrderItem(**defaults)


async def make_order(db, products_and_qty, **overrides):
    """Insert an order whose items reference the given (product, quantity) pairs."""
    items = [
        OrderItemFactory.create(
            product_id=product.id,
            title_snapshot=product.title,
            unit_price=product.price,
            quantity=qty,
        )
        for product, qty in products_and_qty
    ]
    order = OrderFactory.create(
        amount=sum(i.unit_price * i.quantity for i in items), items=items, **overrides
    )
    db.add(order)
    await db.commit()
    return order
