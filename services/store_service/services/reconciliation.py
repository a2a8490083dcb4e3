"""Dead-letter queue for payments whose order could not be written."""

from typing import Optional

from libs.common.logging import get_logger
from services.store_service.models import OrderReconciliation, ReconciliationStatus
from services.store_service.schemas import CreateOrderRequest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def record_unrecorded_payment(
    db: AsyncSession, request: CreateOrderRequest, error: str
) -> Optional[OrderReconciliation]:
    """Queue a paid-but-unrecorded payment for replay.

    One row per payment intent: a repeat failure refreshes the payload and
    error on the existing row. Returns None if the row itself could not be
    written; the caller still reports the original failure.
    """
    payload = request.model_dump(mode="json", by_alias=True)
    try:
        result = await db.execute(
            select(OrderReconciliation).where(
                OrderReconciliation.payment_intent_id == request.payment_intent_id
            )
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            entry = OrderReconciliation(
                payment_intent_id=request.payment_intent_id,
                payload=payload,
                error=error,
                attempts=0,
                status=ReconciliationStatus.PENDING,
            )
            db.add(entry)
        else:
            entry.payload = payload
            entry.error = error
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.critical(
            f"Paid order could not be queued for reconciliation: {request.payment_intent_id}",
            exc_info=True,
        )
        return None

    logger.error(
        "Payment queued for order reconciliation",
        extra={"extra_fields": {
            "payment_intent_id": request.payment_intent_id,
            "error": error,
        }},
    )
    return entry


async def list_reconciliations(
    db: AsyncSession,
    status: Optional[ReconciliationStatus] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[OrderReconciliation]:
    query = select(OrderReconciliation).order_by(OrderReconciliation.created_at.desc())
    if status:
        query = query.where(OrderReconciliation.status == status)
    result = await db.execute(query.offset(offset).limit(limit))
    return list(result.scalars().all())
