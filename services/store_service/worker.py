"""ARQ worker for store order reconciliation."""

from arq import cron
from libs.common.arq_config import get_redis_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def task_reconcile_unrecorded_payments(ctx: dict):
    from services.store_service.tasks import reconcile_unrecorded_payments

    logger.info("Running: reconcile_unrecorded_payments")
    await reconcile_unrecorded_payments()


class WorkerSettings:
    redis_settings = get_redis_settings()

    functions = [task_reconcile_unrecorded_payments]

    cron_jobs = [
        cron(
            task_reconcile_unrecorded_payments,
            minute={0, 5, 10, 15, 20, 25, 30, 35, 40, 45, 50, 55},
            run_at_startup=True,
        ),
    ]
