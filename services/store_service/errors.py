"""Checkout error taxonomy.

Routers map these to HTTP responses; nothing branches on message text.
"""

from typing import Optional

from libs.common.emails.core import NotificationError


class StoreError(Exception):
    """Base class for checkout/order failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Validation (caught closest to user input, HTTP 400)
# ---------------------------------------------------------------------------


class ValidationError(StoreError):
    pass


class EmptyCart(ValidationError):
    def __init__(self):
        super().__init__("No items provided for order")


class InvalidOrderItem(ValidationError):
    def __init__(self, index: int, reason: str = "is missing a product id"):
        self.index = index
        super().__init__(f"Item at index {index} {reason}")


class IncompleteShippingDetails(ValidationError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing shipping fields: {', '.join(missing)}")


class TotalMismatch(ValidationError):
    pass


# ---------------------------------------------------------------------------
# Payment (recoverable, shopper may retry)
# ---------------------------------------------------------------------------


class PaymentError(StoreError):
    """Processor-side failure. ``upstream`` marks the processor as the cause."""

    upstream: bool = False

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class PaymentInitError(PaymentError):
    upstream = True


class PaymentNotSucceeded(PaymentError):
    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Payment not successful. Status: {status}", code=status)


class PaymentAmountMismatch(PaymentError):
    pass


class PaymentVerificationError(PaymentError):
    upstream = True


# ---------------------------------------------------------------------------
# Persistence / lookup
# ---------------------------------------------------------------------------


class PersistenceError(StoreError):
    def __init__(self, message: str, payment_intent_id: Optional[str] = None):
        self.payment_intent_id = payment_intent_id
        super().__init__(message)


class NotFound(StoreError):
    pass


def http_status(exc: StoreError) -> int:
    """HTTP status for a taxonomy error."""
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, PaymentError):
        return 502 if exc.upstream else 400
    if isinstance(exc, NotFound):
        return 404
    return 500


__all__ = [
    "EmptyCart",
    "IncompleteShippingDetails",
    "InvalidOrderItem",
    "NotFound",
    "NotificationError",
    "PaymentAmountMismatch",
    "PaymentError",
    "PaymentInitError",
    "PaymentNotSucceeded",
    "PaymentVerificationError",
    "PersistenceError",
    "StoreError",
    "TotalMismatch",
    "ValidationError",
    "http_status",
]
