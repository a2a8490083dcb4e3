"""Dead-letter rows for payments that succeeded without a recorded order."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.commerce import JSONType
from services.store_service.models.enums import ReconciliationStatus, enum_values
from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class OrderReconciliation(Base):
    """A paid payment intent whose order could not be persisted.

    ``payload`` holds the create-order request so the worker can replay it.
    """

    __tablename__ = "order_reconciliations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    payment_intent_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    attempts: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    status: Mapped[ReconciliationStatus] = mapped_column(
        SAEnum(
            ReconciliationStatus,
            values_callable=enum_values,
            name="order_reconciliation_status_enum",
        ),
        default=ReconciliationStatus.PENDING,
        server_default="pending",
    )
    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<OrderReconciliation {self.payment_intent_id} status={self.status}>"
