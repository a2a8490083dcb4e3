"""Store commerce models: orders and order line items."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.enums import (
    OrderStatus,
    PaymentStatus,
    enum_values,
)
from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ============================================================================
# ORDER MODELS
# ============================================================================


class Order(Base):
    """Completed purchases. One row per successful payment intent."""

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    # Owner (null for guest checkout)
    user_id: Mapped[Optional[str]] = mapped_column(
        String(255), index=True, nullable=True
    )

    # Pricing
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    shipping_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )
    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )

    # Status
    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(
            OrderStatus,
            values_callable=enum_values,
            name="order_status_enum",
        ),
        default=OrderStatus.PROCESSING,
        server_default="processing",
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(
            PaymentStatus,
            values_callable=enum_values,
            name="order_payment_status_enum",
        ),
        default=PaymentStatus.PENDING,
        server_default="pending",
    )

    # Address snapshots taken at checkout
    shipping_address: Mapped[dict] = mapped_column(JSONType, nullable=False)
    billing_address: Mapped[dict] = mapped_column(JSONType, nullable=False)

    # Stripe PaymentIntent id; unique so a retried create-order cannot duplicate
    payment_intent_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="order_non_negative_total"),
    )

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )
    customer = relationship(
        "CustomerProfile",
        primaryjoin="foreign(Order.user_id) == CustomerProfile.user_id",
        viewonly=True,
        lazy="raise",
    )

    def __repr__(self):
        return f"<Order {self.id} payment={self.payment_intent_id}>"


class OrderItem(Base):
    """Order line items (snapshot at order time, insert-only)."""

    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Cart line order, so items read back in the sequence they were bought
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Snapshot at order time (catalog may change)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    cost_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    cost_price_estimated: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Variant selectors
    color: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    shade: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="order_item_positive_quantity"),
        CheckConstraint("unit_price >= 0", name="order_item_non_negative_price"),
    )

    # Relationships
    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem {self.product_name} qty={self.quantity}>"
