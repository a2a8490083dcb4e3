"""Checkout payment flow: intent initiation and confirmation state machine.

``PaymentIntentInitiator`` fetches a client secret for the current total.
``PaymentConfirmationHandler`` submits a payment method (or resumes after a
3-D Secure redirect), classifies the processor status and funnels every
success through ``on_payment_succeeded`` so the order is created once.
"""

import asyncio
import enum
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from libs.common.config import get_settings
from libs.common.currency import ZERO, quantize_money, to_minor_units
from libs.common.logging import get_logger
from services.store_service.errors import (
    IncompleteShippingDetails,
    PaymentError,
    PaymentInitError,
    PaymentVerificationError,
    ValidationError,
)
from services.store_service.schemas import CreateOrderRequest, ShippingDetails
from services.store_service.services.cart_store import CartStore
from services.store_service.services.order_service import OrderResult, create_order
from services.store_service.services.pricing import (
    checkout_subtotal,
    compute_checkout_totals,
)
from services.store_service.stripe_client import (
    PaymentIntent,
    StripeClient,
    StripeError,
    payment_intent_id_from_secret,
)

logger = get_logger(__name__)

OrderTrigger = Callable[[str], Awaitable[OrderResult]]


# ---------------------------------------------------------------------------
# Initiation
# ---------------------------------------------------------------------------


async def initiate_payment_intent(
    stripe_client: StripeClient, amount: Decimal, currency: Optional[str] = None
) -> PaymentIntent:
    """Reserve a charge for exactly ``amount`` (major units)."""
    if amount is None or amount <= ZERO:
        raise ValidationError("Invalid amount")
    currency = currency or get_settings().STORE_CURRENCY
    minor = to_minor_units(amount)
    try:
        intent = await stripe_client.create_payment_intent(amount=minor, currency=currency)
    except StripeError as e:
        logger.error(
            "Payment intent creation failed",
            extra={"extra_fields": {
                "amount": minor,
                "error_type": e.error_type,
                "code": e.code,
            }},
        )
        raise PaymentInitError("Failed to create payment intent", code=e.code) from e
    logger.info(f"Created payment intent {intent.id} for {minor} {currency}")
    return intent


class PaymentIntentInitiator:
    """Keeps one client secret per checkout total.

    The checkout page calls ``ensure_client_secret`` whenever its computed
    total changes; an unchanged total reuses the secret it already has.
    """

    def __init__(self, stripe_client: StripeClient, currency: Optional[str] = None):
        self.stripe_client = stripe_client
        self.currency = currency
        self.amount: Optional[Decimal] = None
        self.client_secret: Optional[str] = None

    async def ensure_client_secret(self, total: Decimal) -> Optional[str]:
        total = quantize_money(total)
        if total <= ZERO:
            return None
        if self.client_secret and self.amount == total:
            return self.client_secret
        intent = await initiate_payment_intent(self.stripe_client, total, self.currency)
        self.amount, self.client_secret = total, intent.client_secret
        return self.client_secret

    @staticmethod
    def can_collect_payment(shipping: ShippingDetails) -> bool:
        """Payment collection is only shown once every shipping field is filled."""
        return shipping.is_complete()


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------


class PaymentState(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    PROCESSING = "processing"
    REQUIRES_ACTION = "requires_action"
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    FAILED = "failed"


_STATUS_MAP = {
    "succeeded": PaymentState.SUCCEEDED,
    "processing": PaymentState.PROCESSING,
    "requires_action": PaymentState.REQUIRES_ACTION,
    "requires_payment_method": PaymentState.REQUIRES_PAYMENT_METHOD,
}

STATUS_MESSAGES = {
    PaymentState.SUCCEEDED: "Payment succeeded!",
    PaymentState.PROCESSING: "Your payment is processing.",
    PaymentState.REQUIRES_ACTION: "Additional authentication is required.",
    PaymentState.REQUIRES_PAYMENT_METHOD: "Your payment was not successful, please try again.",
    PaymentState.FAILED: "Something went wrong.",
}


def classify_intent_status(status: str) -> PaymentState:
    """Map a processor status onto the handler's states; unknown means failed."""
    return _STATUS_MAP.get(status, PaymentState.FAILED)


class PaymentConfirmationHandler:
    """One checkout's payment confirmation.

    ``submit`` and ``resume`` are the two entry points; both classify via
    ``classify_intent_status`` and hand success to ``on_payment_succeeded``.
    """

    RETRYABLE = {
        PaymentState.IDLE,
        PaymentState.REQUIRES_PAYMENT_METHOD,
        PaymentState.FAILED,
    }

    def __init__(
        self,
        stripe_client: StripeClient,
        client_secret: str,
        shipping: ShippingDetails,
        on_order: OrderTrigger,
        return_url: Optional[str] = None,
        cart: Optional[CartStore] = None,
    ):
        self.stripe_client = stripe_client
        self.client_secret = client_secret
        self.shipping = shipping
        self.on_order = on_order
        self.return_url = return_url
        self.cart = cart

        self.state = PaymentState.IDLE
        self.message: Optional[str] = None
        self.order_result: Optional[OrderResult] = None
        self._order_lock = asyncio.Lock()

    def _apply(self, intent: PaymentIntent) -> PaymentState:
        self.state = classify_intent_status(intent.status)
        self.message = STATUS_MESSAGES[self.state]
        return self.state

    async def submit(self, payment_method: str) -> PaymentState:
        if self.state == PaymentState.SUCCEEDED:
            return self.state
        if self.state not in self.RETRYABLE:
            raise PaymentError(
                "A payment is already in progress", code=self.state.value
            )
        missing = self.shipping.missing_fields()
        if missing:
            raise IncompleteShippingDetails(missing)

        self.state = PaymentState.SUBMITTING
        self.message = None
        try:
            intent = await self.stripe_client.confirm_payment_intent(
                payment_intent_id_from_secret(self.client_secret),
                payment_method,
                return_url=self.return_url,
            )
        except StripeError as e:
            if e.is_card_error:
                self.state = PaymentState.REQUIRES_PAYMENT_METHOD
                self.message = e.message
            else:
                self.state = PaymentState.FAILED
                self.message = STATUS_MESSAGES[PaymentState.FAILED]
                logger.error(f"Payment confirmation failed: {e.error_type}/{e.code}")
            return self.state

        if self._apply(intent) == PaymentState.SUCCEEDED:
            await self.on_payment_succeeded(intent.id)
        return self.state

    async def resume(self, client_secret: Optional[str] = None) -> PaymentState:
        """Re-read the intent after a redirect return and re-classify it."""
        secret = client_secret or self.client_secret
        try:
            intent = await self.stripe_client.retrieve_by_client_secret(secret)
        except ValueError as e:
            raise PaymentError("Invalid payment reference", code="invalid_client_secret") from e
        except StripeError as e:
            raise PaymentVerificationError(
                "Could not retrieve payment status", code=e.code
            ) from e

        self.client_secret = secret
        if self._apply(intent) == PaymentState.SUCCEEDED:
            await self.on_payment_succeeded(intent.id)
        return self.state

    async def on_payment_succeeded(self, reference: str) -> OrderResult:
        """Create the order for ``reference`` at most once, then clear the cart."""
        async with self._order_lock:
            if self.order_result is not None:
                return self.order_result
            self.state = PaymentState.SUCCEEDED
            self.message = STATUS_MESSAGES[PaymentState.SUCCEEDED]
            self.order_result = await self.on_order(reference)
            if self.cart is not None:
                self.cart.clear()
            return self.order_result


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_order_request(
    cart: CartStore,
    shipping: ShippingDetails,
    user_id: Optional[str] = None,
    save_address: bool = False,
) -> CreateOrderRequest:
    """Snapshot the cart and totals as a create-order request (no payment id yet)."""
    lines = cart.order_lines()
    totals = compute_checkout_totals(checkout_subtotal(lines))
    return CreateOrderRequest(
        user_id=user_id,
        cart_items=lines,
        shipping_details=shipping,
        total_amount=totals.total,
        shipping_cost=totals.shipping,
        save_address=save_address,
    )


def make_order_trigger(
    session_factory, stripe_client: StripeClient, request: CreateOrderRequest
) -> OrderTrigger:
    """Bind a create-order call to a payment reference for the handler."""

    async def trigger(reference: str) -> OrderResult:
        async with session_factory() as db:
            return await create_order(
                db,
                request.model_copy(update={"payment_intent_id": reference}),
                stripe_client,
            )

    return trigger
