"""Enum definitions for store service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class ProductType(str, enum.Enum):
    TICKET = "ticket"
    ITEM = "item"


class StockType(str, enum.Enum):
    BOOLEAN = "boolean"  # available / unavailable flag
    QUANTITY = "quantity"  # finite countable stock


class OrderStatus(str, enum.Enum):
    CREATED = "created"
    PAID = "paid"
    CANCELLED = "cancelled"
