"""Order creation: the only writer of Order/OrderItem rows.

Given a payment intent that Stripe reports as succeeded, persist one order
and its line items in a single transaction. Idempotent per payment intent:
a retried call returns the order created by the first one.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from libs.common.config import get_settings
from libs.common.currency import (
    CENT,
    ZERO,
    format_money,
    quantize_money,
    to_minor_units,
)
from libs.common.datetime_utils import display_date
from libs.common.emails.core import NotificationError
from libs.common.emails.store import send_order_confirmation_email
from libs.common.logging import get_logger
from services.store_service.errors import (
    EmptyCart,
    InvalidOrderItem,
    PaymentAmountMismatch,
    PaymentNotSucceeded,
    PaymentVerificationError,
    PersistenceError,
    TotalMismatch,
    ValidationError,
)
from services.store_service.models import (
    CustomerProfile,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
)
from services.store_service.schemas import CartLine, CreateOrderRequest
from services.store_service.services.pricing import (
    discounted_unit_price,
    line_subtotal,
    sum_subtotals,
)
from services.store_service.services.reconciliation import record_unrecorded_payment
from services.store_service.stripe_client import StripeClient, StripeError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

OrderNotifier = Callable[..., Awaitable[object]]

SUCCEEDED = "succeeded"


@dataclass
class OrderResult:
    order: Order
    created: bool


# ---------------------------------------------------------------------------
# Validation and line derivation
# ---------------------------------------------------------------------------


def validate_lines(lines: list[CartLine]) -> None:
    """Reject the whole order if any line is unusable; nothing is written."""
    if not lines:
        raise EmptyCart()
    for index, line in enumerate(lines):
        if not line.id:
            raise InvalidOrderItem(index)
        if line.quantity < 1:
            raise InvalidOrderItem(index, "has a quantity below 1")


def build_order_items(lines: list[CartLine]) -> list[OrderItem]:
    """Derive insert-only OrderItem rows from cart lines.

    Unit price is the discounted price snapshotted in the cart, rounded for
    display; subtotal is the rounded line amount the shopper was charged.
    When the cart does not carry a true cost price, cost is estimated from
    DEFAULT_COST_RATIO and the row is flagged as estimated.
    """
    cost_ratio = get_settings().DEFAULT_COST_RATIO
    items = []
    for position, line in enumerate(lines):
        unit_price = discounted_unit_price(line.price, line.discount)
        if line.cost_price is not None:
            cost_price, estimated = quantize_money(line.cost_price), False
        else:
            cost_price, estimated = quantize_money(unit_price * cost_ratio), True
        items.append(
            OrderItem(
                position=position,
                product_id=line.id,
                product_name=line.name or "Unknown Product",
                quantity=line.quantity,
                unit_price=unit_price,
                cost_price=cost_price,
                cost_price_estimated=estimated,
                subtotal=line_subtotal(line.price, line.discount, line.quantity),
                color=line.selected_color or None,
                shade=line.selected_shade or None,
                image_url=line.image_url,
            )
        )
    return items


def reconcile_total(
    items: list[OrderItem], shipping_cost: Decimal, discount: Decimal, claimed_total: Decimal
) -> Decimal:
    """Return subtotal + shipping − discount, rejecting a claimed total that disagrees."""
    expected = quantize_money(
        sum_subtotals(item.subtotal for item in items) + shipping_cost - discount
    )
    if abs(expected - claimed_total) > CENT:
        raise TotalMismatch(
            f"Order total {claimed_total} does not match items + shipping ({expected})"
        )
    return expected


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_order_by_payment_intent(
    db: AsyncSession, payment_intent_id: str
) -> Optional[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.payment_intent_id == payment_intent_id)
        .options(selectinload(Order.items))
    )
    return result.scalar_one_or_none()


async def verify_payment(
    stripe_client: StripeClient, payment_intent_id: str, total_amount: Decimal
) -> None:
    """Confirm with Stripe that the intent succeeded for exactly this amount."""
    try:
        intent = await stripe_client.retrieve_payment_intent(payment_intent_id)
    except StripeError as e:
        if e.status_code == 404:
            raise PaymentNotSucceeded("not_found") from e
        raise PaymentVerificationError(
            "Could not verify payment with the payment processor", code=e.code
        ) from e

    if intent.status != SUCCEEDED:
        raise PaymentNotSucceeded(intent.status)
    if intent.amount != to_minor_units(total_amount):
        logger.error(
            "Payment amount mismatch",
            extra={"extra_fields": {
                "payment_intent_id": payment_intent_id,
                "charged": intent.amount,
                "expected": to_minor_units(total_amount),
            }},
        )
        raise PaymentAmountMismatch(
            "Charged amount does not match the order total", code="amount_mismatch"
        )


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def create_order(
    db: AsyncSession,
    request: CreateOrderRequest,
    stripe_client: StripeClient,
    *,
    notify: Optional[OrderNotifier] = send_order_confirmation_email,
    record_failures: bool = True,
) -> OrderResult:
    """Persist the order for a succeeded payment.

    Raises:
        ValidationError: missing payment reference, bad line, total mismatch
        PaymentError: intent not succeeded, amount mismatch, Stripe unreachable
        PersistenceError: insert failed; the payment is queued for reconciliation
    """
    payment_intent_id = (request.payment_intent_id or "").strip()
    if not payment_intent_id:
        raise ValidationError("Payment intent ID is required")

    lines = request.cart_items
    validate_lines(lines)

    existing = await get_order_by_payment_intent(db, payment_intent_id)
    if existing:
        logger.info(f"Order already recorded for payment {payment_intent_id}")
        return OrderResult(order=existing, created=False)

    items = build_order_items(lines)
    discount = ZERO
    total = reconcile_total(items, request.shipping_cost, discount, request.total_amount)

    await verify_payment(stripe_client, payment_intent_id, request.total_amount)

    address = request.shipping_details.model_dump(by_alias=True)

    order = Order(
        user_id=request.user_id or None,
        total_amount=total,
        shipping_cost=quantize_money(request.shipping_cost),
        tax_amount=ZERO,
        discount_amount=discount,
        status=OrderStatus.PROCESSING,
        payment_status=PaymentStatus.PAID,
        shipping_address=address,
        billing_address=dict(address),
        payment_intent_id=payment_intent_id,
        items=[],
    )

    try:
        db.add(order)
        await db.flush()
        order.items.extend(items)
        await db.flush()
        await db.commit()
    except IntegrityError:
        await db.rollback()
        # A concurrent call for the same payment won the unique constraint
        existing = await get_order_by_payment_intent(db, payment_intent_id)
        if existing:
            logger.info(f"Order for payment {payment_intent_id} created concurrently")
            return OrderResult(order=existing, created=False)
        logger.exception(f"Order insert failed for payment {payment_intent_id}")
        await _escalate(db, request, "integrity error", record_failures)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Order insert failed for payment {payment_intent_id}")
        await _escalate(db, request, f"{type(e).__name__}: {e}", record_failures)

    logger.info(
        "Order created",
        extra={"extra_fields": {
            "order_id": str(order.id),
            "payment_intent_id": payment_intent_id,
            "items": len(items),
            "total_amount": str(total),
        }},
    )

    if request.user_id:
        if request.save_address:
            await save_shipping_address(db, request.user_id, request.shipping_details)
        if notify is not None:
            await send_confirmation(db, order, request.user_id, notify)

    return OrderResult(order=order, created=True)


async def _escalate(
    db: AsyncSession, request: CreateOrderRequest, error: str, record: bool
) -> None:
    if record:
        await record_unrecorded_payment(db, request, error)
    raise PersistenceError(
        "An error occurred while creating the order",
        payment_intent_id=request.payment_intent_id,
    )


# ---------------------------------------------------------------------------
# Post-commit side effects (never fail the order)
# ---------------------------------------------------------------------------


async def save_shipping_address(db: AsyncSession, user_id: str, shipping) -> None:
    """Copy the checkout address onto the shopper's profile."""
    try:
        profile = await db.get(CustomerProfile, user_id)
        if profile is None:
            profile = CustomerProfile(user_id=user_id, email=shipping.email)
            db.add(profile)
        profile.first_name = shipping.first_name or profile.first_name
        profile.last_name = shipping.last_name or profile.last_name
        profile.address = shipping.address
        profile.city = shipping.city
        profile.state = shipping.state
        profile.zip_code = shipping.postal_code
        profile.country = shipping.country
        profile.phone = shipping.phone
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.warning(f"Could not save shipping address for user {user_id}", exc_info=True)


async def send_confirmation(
    db: AsyncSession, order: Order, user_id: str, notify: OrderNotifier
) -> None:
    """Email the shopper; failures are logged and swallowed."""
    try:
        profile = await db.get(CustomerProfile, user_id)
    except SQLAlchemyError:
        logger.warning(f"Could not load profile for order email ({user_id})", exc_info=True)
        return
    if profile is None:
        logger.info(f"No profile for user {user_id}; skipping order confirmation email")
        return

    currency = get_settings().STORE_CURRENCY
    try:
        await notify(
            to_email=profile.email,
            customer_name=profile.display_name,
            order_id=str(order.id),
            order_date=display_date(order.created_at),
            order_total=format_money(order.total_amount, currency),
            items=[
                {
                    "product_name": item.product_name,
                    "quantity": item.quantity,
                    "subtotal": format_money(item.subtotal, currency),
                }
                for item in order.items
            ],
        )
    except NotificationError as e:
        logger.error(
            f"Error sending order confirmation email for {order.id}: {e.message}"
        )
    except Exception:
        logger.exception(f"Unexpected error sending order confirmation email for {order.id}")
