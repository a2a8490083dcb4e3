"""Unit tests for transactional email sending via Resend."""

import json

import httpx
import pytest
from libs.common.config import get_settings
from libs.common.emails.core import NotificationError, send_email
from libs.common.emails.store import (
    render_order_confirmation,
    send_order_confirmation_email,
)

ITEMS = [{"product_name": "Velvet <Matte> Lipstick", "quantity": 2, "subtotal": "AED 180.00"}]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_send_email_uses_default_sender():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_1"})

    data = await send_email(
        "layla@example.com",
        "Hello",
        "<p>Hi</p>",
        transport=httpx.MockTransport(handler),
    )

    assert data == {"id": "email_1"}
    assert seen["path"] == "/emails"
    assert seen["body"]["from"] == "Joulaa <noreply@joulaa.com>"
    assert seen["body"]["to"] == ["layla@example.com"]
    assert "text" not in seen["body"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_send_email_rejected_raises_notification_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "Invalid `to` field"})

    with pytest.raises(NotificationError) as exc_info:
        await send_email("x@example.com", "s", "<p>h</p>", transport=httpx.MockTransport(handler))

    assert exc_info.value.status_code == 422
    assert exc_info.value.message == "Invalid `to` field"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_send_email_without_api_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "RESEND_API_KEY", "")

    with pytest.raises(NotificationError):
        await send_email("x@example.com", "s", "<p>h</p>")


@pytest.mark.unit
def test_order_confirmation_template_escapes_names():
    subject, text, html = render_order_confirmation(
        "Layla", "0f8fad5b-d9cb-469f-a165-70867728950e", "Oct 19, 2026", "AED 185.99", ITEMS
    )

    assert subject == "Order Confirmed - #0F8FAD5B"
    assert "Velvet <Matte> Lipstick x2 - AED 180.00" in text
    assert "Velvet &lt;Matte&gt; Lipstick" in html
    assert "AED 185.99" in html


@pytest.mark.asyncio
@pytest.mark.unit
async def test_send_order_confirmation_includes_text_part():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_2"})

    await send_order_confirmation_email(
        to_email="layla@example.com",
        customer_name="Layla",
        order_id="0f8fad5b-d9cb-469f-a165-70867728950e",
        order_date="Oct 19, 2026",
        order_total="AED 185.99",
        items=ITEMS,
        transport=httpx.MockTransport(handler),
    )

    assert seen["body"]["subject"] == "Order Confirmed - #0F8FAD5B"
    assert "Total: AED 185.99" in seen["body"]["text"]
