"""Unit tests for transactional email sending and templates."""

import json

import httpx
import pytest
from libs.common.config import get_settings
from libs.common.emails import core
from libs.common.emails.store import (
    format_amount,
    send_order_status_email,
    send_order_summary_email,
    short_order_id,
)

ORDER_ID = "3f2a9c1e-0000-4000-8000-000000000000"
ITEMS = [{"title": "Entrada General", "quantity": 2, "unit_price": 6000}]


@pytest.fixture
def resend(monkeypatch):
    """Capture Resend API calls made through httpx."""
    requests: list[httpx.Request] = []
    original_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "email_123"})

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return original_client(*args, **kwargs)

    monkeypatch.setattr(get_settings(), "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(core.httpx, "AsyncClient", client_factory)
    return requests


@pytest.mark.unit
def test_format_amount_uses_thousands_dots():
    assert format_amount(12500) == "$12.500"
    assert format_amount(0) == "$0"


@pytest.mark.unit
def test_short_order_id():
    assert short_order_id(ORDER_ID) == "3F2A9C1E"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_send_email_skipped_without_api_key():
    sent = await core.send_email("a@test.com", "Hola", "cuerpo")
    assert sent is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_order_summary_email_payload(resend):
    sent = await send_order_summary_email("ana@test.com", "Ana", ORDER_ID, ITEMS, 12000)

    assert sent is True
    request = resend[0]
    assert request.url.path == "/emails"
    assert request.headers["Authorization"] == "Bearer re_test"
    payload = json.loads(request.content)
    assert payload["to"] == ["ana@test.com"]
    assert payload["from"] == get_settings().EMAIL_FROM
    assert "3F2A9C1E" in payload["subject"]
    assert "PAGO PENDIENTE" in payload["text"]
    assert "$12.000" in payload["text"]
    assert "Entrada General" in payload["html"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_status_emails_differ_by_kind(resend):
    await send_order_status_email("ana@test.com", "Ana", ORDER_ID, "confirmed", ITEMS, 12000)
    await send_order_status_email("ana@test.com", "Ana", ORDER_ID, "cancelled", ITEMS, 12000)

    subjects = [json.loads(r.content)["subject"] for r in resend]
    assert subjects[0].startswith("Pago confirmado")
    assert subjects[1].startswith("Orden anulada")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_send_email_raises_on_provider_error(monkeypatch):
    original_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(
            lambda request: httpx.Response(422, json={"message": "invalid from"})
        )
        return original_client(*args, **kwargs)

    monkeypatch.setattr(get_settings(), "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(core.httpx, "AsyncClient", client_factory)

    with pytest.raises(httpx.HTTPStatusError):
        await core.send_email("a@test.com", "Hola", "cuerpo")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_html_body_escapes_buyer_name_and_titles(resend):
    name = '<a href="https://evil.example">pay here</a>'
    items = [{"title": "<b>Entrada</b>", "quantity": 1, "unit_price": 6000}]

    await send_order_summary_email("ana@test.com", name, ORDER_ID, items, 6000)
    await send_order_status_email("ana@test.com", name, ORDER_ID, "confirmed", items, 6000)

    for request in resend:
        payload = json.loads(request.content)
        assert '<a href="https://evil.example">' not in payload["html"]
        assert "&lt;a href=&quot;https://evil.example&quot;&gt;" in payload["html"]
        assert "<b>Entrada</b>" not in payload["html"]
        assert "&lt;b&gt;Entrada&lt;/b&gt;" in payload["html"]
        assert name in payload["text"]
