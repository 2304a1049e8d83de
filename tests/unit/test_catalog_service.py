"""Unit tests for product catalog validation and normalisation."""

import pytest
from fastapi import HTTPException
from services.store_service.models import ProductType, StockType
from services.store_service.services.catalog_service import (
    create_product,
    list_products,
    normalize_product_fields,
    update_product,
)
from tests.factories import ProductFactory


def _fields(**overrides):
    data = {"title": "Entrada", "type": "ticket", "price": 10000}
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# normalize_product_fields
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_boolean_stock_collapses_to_flag():
    assert normalize_product_fields(_fields(stock_value=7))["stock_value"] == 1
    assert normalize_product_fields(_fields(stock_value=0))["stock_value"] == 0


@pytest.mark.unit
def test_defaults_to_boolean_stock():
    data = normalize_product_fields(_fields())
    assert data["stock_type"] == StockType.BOOLEAN
    assert data["stock_value"] == 1
    assert data["type"] == ProductType.TICKET


@pytest.mark.unit
def test_quantity_stock_sets_initial():
    data = normalize_product_fields(_fields(stock_type="quantity", stock_value=40))
    assert data["stock_value"] == 40
    assert data["stock_initial"] == 40


@pytest.mark.unit
def test_title_is_trimmed():
    assert normalize_product_fields(_fields(title="  Polera  "))["title"] == "Polera"


@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "   "},
        {"type": "voucher"},
        {"price": "gratis"},
        {"price": True},
        {"price": float("nan")},
        {"price": -1},
        {"stock_type": "infinite"},
        {"stock_value": -2},
        {"max_per_order": 0},
    ],
)
def test_invalid_fields_rejected(overrides):
    with pytest.raises(HTTPException) as exc:
        normalize_product_fields(_fields(**overrides))
    assert exc.value.status_code == 400


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_product_normalises_and_persists(db_session):
    product = await create_product(
        db_session, _fields(price=12500.0, stock_value=3, category="merch")
    )
    assert product.id is not None
    assert product.price == 12500
    assert product.stock_value == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_product_partial(db_session):
    product = ProductFactory.create(price=1000, visible=True)
    db_session.add(product)
    await db_session.commit()

    updated = await update_product(db_session, product.id, {"price": 1500, "visible": False})

    assert updated.price == 1500
    assert updated.visible is False
    assert updated.title == product.title


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_switching_to_boolean_normalises_stock(db_session):
    product = ProductFactory.quantity(stock_value=12)
    db_session.add(product)
    await db_session.commit()

    updated = await update_product(db_session, product.id, {"stock_type": StockType.BOOLEAN})
    assert updated.stock_value == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_missing_product_404(db_session):
    with pytest.raises(HTTPException) as exc:
        await update_product(db_session, 4242, {"price": 1})
    assert exc.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_products_visible_sorted_by_category(db_session):
    db_session.add_all(
        [
            ProductFactory.create(title="Polera", category="merch"),
            ProductFactory.create(title="Oculto", category="merch", visible=False),
            ProductFactory.create(title="Entrada", category="entradas"),
            ProductFactory.create(title="Sticker", category=None),
        ]
    )
    await db_session.commit()

    products = await list_products(db_session)

    assert [p.title for p in products] == ["Entrada", "Polera", "Sticker"]
