"""Background reconciliation tasks for store service."""

from __future__ import annotations

from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.db.config import AsyncSessionLocal
from services.store_service.models import OrderReconciliation, ReconciliationStatus
from services.store_service.schemas import CreateOrderRequest
from services.store_service.stripe_client import StripeClient
from sqlalchemy import select

logger = get_logger(__name__)


async def reconcile_unrecorded_payments(
    session_factory=AsyncSessionLocal,
    stripe_client: Optional[StripeClient] = None,
    notify=None,
) -> dict[str, int]:
    """Replay queued create-order requests until their orders exist.

    Each entry runs in its own session so one bad payload cannot poison the
    rest. Entries that keep failing are marked FAILED after
    RECONCILIATION_MAX_ATTEMPTS for manual follow-up.
    """
    from services.store_service.errors import StoreError
    from services.store_service.services.order_service import create_order

    max_attempts = get_settings().RECONCILIATION_MAX_ATTEMPTS
    stripe_client = stripe_client or StripeClient()
    counts = {"resolved": 0, "retrying": 0, "failed": 0}

    async with session_factory() as db:
        result = await db.execute(
            select(OrderReconciliation.id)
            .where(OrderReconciliation.status == ReconciliationStatus.PENDING)
            .order_by(OrderReconciliation.created_at.asc())
            .limit(100)
        )
        pending_ids = list(result.scalars().all())

    for entry_id in pending_ids:
        async with session_factory() as db:
            entry = await db.get(OrderReconciliation, entry_id)
            if entry is None or entry.status != ReconciliationStatus.PENDING:
                continue
            request = CreateOrderRequest.model_validate(entry.payload)
            try:
                outcome = await create_order(
                    db, request, stripe_client, notify=notify, record_failures=False
                )
            except StoreError as exc:
                await db.rollback()
                entry = await db.get(OrderReconciliation, entry_id)
                entry.attempts += 1
                entry.error = exc.message
                if entry.attempts >= max_attempts:
                    entry.status = ReconciliationStatus.FAILED
                    counts["failed"] += 1
                    logger.error(
                        f"Giving up on order reconciliation for {entry.payment_intent_id} "
                        f"after {entry.attempts} attempts: {exc.message}"
                    )
                else:
                    counts["retrying"] += 1
                    logger.warning(
                        f"Order reconciliation retry {entry.attempts} failed for "
                        f"{entry.payment_intent_id}: {exc.message}"
                    )
                await db.commit()
                continue

            entry = await db.get(OrderReconciliation, entry_id)
            entry.status = ReconciliationStatus.RESOLVED
            entry.order_id = outcome.order.id
            entry.attempts += 1
            await db.commit()
            counts["resolved"] += 1
            logger.info(
                f"Reconciled payment {entry.payment_intent_id} -> order {outcome.order.id}"
            )

    if pending_ids:
        logger.info(
            "Order reconciliation run complete",
            extra={"extra_fields": counts},
        )
    return counts
