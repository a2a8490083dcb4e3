"""Read-side order accessors for the account and admin views."""

import uuid
from typing import Optional

from libs.common.logging import get_logger
from services.store_service.errors import NotFound
from services.store_service.models import Order, OrderStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


async def get_order(
    db: AsyncSession, order_id: uuid.UUID, with_customer: bool = False
) -> Order:
    """Fetch one order with its items, raising NotFound."""
    options = [selectinload(Order.items)]
    if with_customer:
        options.append(selectinload(Order.customer))
    result = await db.execute(select(Order).where(Order.id == order_id).options(*options))
    order = result.scalar_one_or_none()
    if not order:
        raise NotFound("Order not found")
    return order


async def list_user_orders(
    db: AsyncSession, user_id: str, limit: int = 50, offset: int = 0
) -> list[Order]:
    """A shopper's orders with items, newest first."""
    result = await db.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .options(selectinload(Order.items))
        .order_by(Order.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_all_orders(
    db: AsyncSession,
    status: Optional[OrderStatus] = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Order]:
    """All orders with items and purchaser profile, newest first."""
    query = select(Order).options(
        selectinload(Order.items), selectinload(Order.customer)
    )
    if status:
        query = query.where(Order.status == status)
    result = await db.execute(
        query.order_by(Order.created_at.desc()).offset(offset).limit(limit)
    )
    return list(result.scalars().all())


async def update_order_status(
    db: AsyncSession, order_id: uuid.UUID, status: OrderStatus
) -> Order:
    """Move an order through fulfilment. The only post-creation mutation."""
    order = await get_order(db, order_id, with_customer=True)
    previous = order.status
    order.status = status
    await db.commit()
    logger.info(f"Order {order_id} status {previous.value} -> {status.value}")
    return order
