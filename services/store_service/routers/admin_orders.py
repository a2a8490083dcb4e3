"""Admin order management router."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.store_service.models import OrderStatus, ReconciliationStatus
from services.store_service.schemas import (
    AdminOrderResponse,
    OrderStatusUpdate,
    ReconciliationResponse,
)
from services.store_service.services import order_queries
from services.store_service.services.reconciliation import list_reconciliations
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["admin-store"])


# ============================================================================
# ORDERS
# ============================================================================


@router.get("/orders", response_model=list[AdminOrderResponse])
async def list_all_orders(
    status_filter: Optional[OrderStatus] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List all orders with purchaser details, newest first."""
    return await order_queries.list_all_orders(
        db,
        status=status_filter,
        limit=page_size,
        offset=(page - 1) * page_size,
    )


@router.get("/orders/{order_id}", response_model=AdminOrderResponse)
async def get_order_admin(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Get order detail (admin)."""
    return await order_queries.get_order(db, order_id, with_customer=True)


@router.patch("/orders/{order_id}/status", response_model=AdminOrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    status_update: OrderStatusUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Update order status."""
    order = await order_queries.update_order_status(db, order_id, status_update.status)
    logger.info(f"Order {order_id} status set by {current_user.email or current_user.user_id}")
    return order


# ============================================================================
# RECONCILIATION
# ============================================================================


@router.get("/reconciliations", response_model=list[ReconciliationResponse])
async def list_order_reconciliations(
    status_filter: Optional[ReconciliationStatus] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Payments that succeeded without a recorded order."""
    return await list_reconciliations(
        db, status=status_filter, limit=page_size, offset=(page - 1) * page_size
    )
