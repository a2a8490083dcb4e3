"""Unit tests for the order read accessors."""

import uuid

import pytest
from services.store_service.errors import NotFound
from services.store_service.models import OrderStatus
from services.store_service.services.order_queries import (
    get_order,
    list_all_orders,
    list_user_orders,
    update_order_status,
)
from tests.factories import CustomerProfileFactory, OrderFactory


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_order_includes_items(db_session):
    order = OrderFactory.create(items=3)
    db_session.add(order)
    await db_session.commit()
    db_session.expunge_all()

    fetched = await get_order(db_session, order.id)

    assert fetched.id == order.id
    assert [item.product_id for item in fetched.items] == ["P1", "P2", "P3"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_unknown_order_raises_not_found(db_session):
    with pytest.raises(NotFound):
        await get_order(db_session, uuid.uuid4())


@pytest.mark.asyncio
@pytest.mark.unit
async def test_user_orders_newest_first(db_session):
    old = OrderFactory.create(age_days=10)
    new = OrderFactory.create(age_days=1)
    other = OrderFactory.create(user_id="user-2")
    db_session.add_all([old, new, other])
    await db_session.commit()

    orders = await list_user_orders(db_session, "user-1")

    assert [o.id for o in orders] == [new.id, old.id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_all_orders_join_purchaser(db_session):
    db_session.add(CustomerProfileFactory.create(email="layla@example.com"))
    db_session.add(OrderFactory.create(age_days=2))
    db_session.add(OrderFactory.create(user_id=None, age_days=1))
    await db_session.commit()
    db_session.expunge_all()

    orders = await list_all_orders(db_session)

    assert len(orders) == 2
    guest, member = orders
    assert guest.customer is None
    assert member.customer.email == "layla@example.com"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_status(db_session):
    order = OrderFactory.create()
    db_session.add(order)
    await db_session.commit()

    updated = await update_order_status(db_session, order.id, OrderStatus.SHIPPED)

    assert updated.status == OrderStatus.SHIPPED
    shipped = await list_all_orders(db_session, status=OrderStatus.SHIPPED)
    assert [o.id for o in shipped] == [order.id]
