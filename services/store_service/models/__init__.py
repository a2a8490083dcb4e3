"""Store Service models package."""

from services.store_service.models.commerce import Order, OrderItem
from services.store_service.models.customer import CustomerProfile
from services.store_service.models.enums import (
    OrderStatus,
    PaymentStatus,
    ReconciliationStatus,
)
from services.store_service.models.reconciliation import OrderReconciliation

__all__ = [
    "CustomerProfile",
    "Order",
    "OrderItem",
    "OrderReconciliation",
    "OrderStatus",
    "PaymentStatus",
    "ReconciliationStatus",
]
