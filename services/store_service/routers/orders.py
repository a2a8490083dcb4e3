"""Shopper order history router."""

import uuid

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.errors import NotFound
from services.store_service.schemas import OrderResponse
from services.store_service.services.order_queries import get_order, list_user_orders
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["orders"])


@router.get("/orders", response_model=list[OrderResponse])
async def list_my_orders(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Current user's orders, newest first."""
    return await list_user_orders(db, current_user.user_id, limit=limit, offset=offset)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_my_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Order detail. Other users' orders read as not found."""
    order = await get_order(db, order_id)
    if order.user_id != current_user.user_id and not current_user.is_admin:
        raise NotFound("Order not found")
    return order
