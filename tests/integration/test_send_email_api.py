"""Integration tests for POST /api/send-email."""

import pytest
from libs.common.emails.core import NotificationError
from services.store_service.routers import email as email_routes


@pytest.fixture
def sent(monkeypatch):
    calls = []

    async def fake_send_email(**kwargs):
        calls.append(kwargs)
        return {"id": "email_123"}

    monkeypatch.setattr(email_routes, "send_email", fake_send_email)
    return calls


@pytest.mark.asyncio
@pytest.mark.integration
async def test_send_email(client, sent):
    response = await client.post(
        "/api/send-email",
        json={"to": "layla@example.com", "subject": "Hello", "html": "<p>Hi</p>"},
    )

    assert response.status_code == 200, response.text
    assert response.json() == {"success": True, "data": {"id": "email_123"}}
    assert sent[0]["to_email"] == "layla@example.com"
    assert sent[0]["from_email"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_send_email_custom_sender(client, sent):
    response = await client.post(
        "/api/send-email",
        json={
            "to": ["a@example.com", "b@example.com"],
            "subject": "Hello",
            "html": "<p>Hi</p>",
            "from": "Joulaa Support <support@joulaa.com>",
        },
    )

    assert response.status_code == 200
    assert sent[0]["to_email"] == ["a@example.com", "b@example.com"]
    assert sent[0]["from_email"] == "Joulaa Support <support@joulaa.com>"


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "body",
    [
        {"subject": "Hello", "html": "<p>Hi</p>"},
        {"to": "layla@example.com", "html": "<p>Hi</p>"},
        {"to": "layla@example.com", "subject": "Hello", "html": ""},
        {"to": "not-an-email", "subject": "Hello", "html": "<p>Hi</p>"},
    ],
)
async def test_send_email_requires_fields(client, sent, body):
    response = await client.post("/api/send-email", json=body)

    assert response.status_code == 400
    assert "error" in response.json()
    assert sent == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_send_email_provider_failure(client, monkeypatch):
    async def failing_send_email(**kwargs):
        raise NotificationError("Email sender unreachable")

    monkeypatch.setattr(email_routes, "send_email", failing_send_email)

    response = await client.post(
        "/api/send-email",
        json={"to": "layla@example.com", "subject": "Hello", "html": "<p>Hi</p>"},
    )

    assert response.status_code == 502
    assert response.json() == {"error": "Email sender unreachable"}
