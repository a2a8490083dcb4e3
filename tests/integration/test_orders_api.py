"""Integration tests for shopper and admin order endpoints."""

import pytest
from services.store_service.models import OrderReconciliation
from tests.factories import CustomerProfileFactory, OrderFactory, order_payload


async def _seed(session_factory, *objects):
    async with session_factory() as db:
        db.add_all(objects)
        await db.commit()


# ---------------------------------------------------------------------------
# Shopper
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_my_orders_newest_first(client, session_factory, auth_headers):
    old = OrderFactory.create(age_days=5)
    new = OrderFactory.create(age_days=1, items=2)
    theirs = OrderFactory.create(user_id="user-2")
    await _seed(session_factory, old, new, theirs)

    response = await client.get("/api/orders", headers=auth_headers)

    assert response.status_code == 200, response.text
    data = response.json()
    assert [o["id"] for o in data] == [str(new.id), str(old.id)]
    assert len(data[0]["items"]) == 2
    assert data[0]["status"] == "processing"
    assert data[0]["payment_status"] == "paid"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_orders_require_auth(client):
    response = await client.get("/api/orders")

    assert response.status_code in (401, 403)
    assert "error" in response.json()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_my_order(client, session_factory, auth_headers):
    order = OrderFactory.create(items=2)
    await _seed(session_factory, order)

    response = await client.get(f"/api/orders/{order.id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["payment_intent_id"] == order.payment_intent_id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_other_users_order_is_not_found(client, session_factory, auth_headers):
    order = OrderFactory.create(user_id="user-2")
    await _seed(session_factory, order)

    response = await client.get(f"/api/orders/{order.id}", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Order not found"}


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_lists_orders_with_purchaser(client, session_factory, admin_headers):
    await _seed(
        session_factory,
        CustomerProfileFactory.create(email="layla@example.com"),
        OrderFactory.create(),
    )

    response = await client.get("/admin/store/orders", headers=admin_headers)

    assert response.status_code == 200, response.text
    (order,) = response.json()
    assert order["customer"] == {
        "email": "layla@example.com",
        "first_name": "Layla",
        "last_name": "Haddad",
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_routes_reject_shoppers(client, auth_headers):
    response = await client.get("/admin/store/orders", headers=auth_headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Admin privileges required"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_updates_order_status(client, session_factory, admin_headers):
    order = OrderFactory.create()
    await _seed(session_factory, order)

    response = await client.patch(
        f"/admin/store/orders/{order.id}/status",
        json={"status": "shipped"},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    assert response.json()["status"] == "shipped"

    shipped = await client.get(
        "/admin/store/orders", params={"status_filter": "shipped"}, headers=admin_headers
    )
    assert [o["id"] for o in shipped.json()] == [str(order.id)]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_rejects_unknown_status(client, session_factory, admin_headers):
    order = OrderFactory.create()
    await _seed(session_factory, order)

    response = await client.patch(
        f"/admin/store/orders/{order.id}/status",
        json={"status": "lost"},
        headers=admin_headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_lists_reconciliations(client, session_factory, admin_headers):
    await _seed(
        session_factory,
        OrderReconciliation(
            payment_intent_id="pi_lost",
            payload=order_payload(paymentIntentId="pi_lost"),
            error="OperationalError: database is locked",
        ),
    )

    response = await client.get("/admin/store/reconciliations", headers=admin_headers)

    assert response.status_code == 200, response.text
    (entry,) = response.json()
    assert entry["payment_intent_id"] == "pi_lost"
    assert entry["status"] == "pending"
    assert entry["attempts"] == 0
