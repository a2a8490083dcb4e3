"""Checkout router: payment intent creation and order creation."""

from fastapi import APIRouter, Depends
from libs.common.emails.store import send_order_confirmation_email
from libs.db.session import get_async_db
from services.store_service.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    CreatePaymentIntentRequest,
    CreatePaymentIntentResponse,
)
from services.store_service.services.order_service import OrderNotifier, create_order
from services.store_service.services.payment_flow import initiate_payment_intent
from services.store_service.stripe_client import StripeClient, get_stripe_client
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["checkout"])


def get_order_notifier() -> OrderNotifier:
    """Order confirmation sender (FastAPI dependency)."""
    return send_order_confirmation_email


# ============================================================================
# PAYMENT INTENT
# ============================================================================


@router.post("/create-payment-intent", response_model=CreatePaymentIntentResponse)
async def create_payment_intent(
    request: CreatePaymentIntentRequest,
    stripe_client: StripeClient = Depends(get_stripe_client),
):
    """Reserve a charge for the checkout total and return its client secret."""
    intent = await initiate_payment_intent(stripe_client, request.amount)
    return CreatePaymentIntentResponse(client_secret=intent.client_secret)


# ============================================================================
# ORDER
# ============================================================================


@router.post("/create-order", response_model=CreateOrderResponse)
async def create_order_endpoint(
    request: CreateOrderRequest,
    db: AsyncSession = Depends(get_async_db),
    stripe_client: StripeClient = Depends(get_stripe_client),
    notify: OrderNotifier = Depends(get_order_notifier),
):
    """Record the order for a succeeded payment. Safe to retry."""
    result = await create_order(db, request, stripe_client, notify=notify)
    message = (
        "Order created successfully" if result.created else "Order already recorded"
    )
    return CreateOrderResponse(order_id=result.order.id, message=message)
