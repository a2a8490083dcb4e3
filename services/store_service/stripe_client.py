"""
Stripe API client for PaymentIntents.

Provides async methods for:
- Creating a PaymentIntent for an exact checkout amount
- Retrieving a PaymentIntent (by id or client secret)
- Confirming a PaymentIntent with a payment method
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.store_service.errors import PaymentInitError

logger = get_logger(__name__)


@dataclass
class PaymentIntent:
    """The subset of a Stripe PaymentIntent the checkout flow relies on."""

    id: str
    client_secret: Optional[str]
    status: str  # requires_payment_method, requires_action, processing, succeeded, canceled
    amount: int  # in minor units
    currency: str
    next_action: Optional[dict] = None

    @classmethod
    def from_api(cls, data: dict) -> "PaymentIntent":
        return cls(
            id=data.get("id", ""),
            client_secret=data.get("client_secret"),
            status=data.get("status", ""),
            amount=int(data.get("amount") or 0),
            currency=data.get("currency", ""),
            next_action=data.get("next_action"),
        )


class StripeError(Exception):
    """Stripe API error, carrying Stripe's typed error fields."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
        code: Optional[str] = None,
        decline_code: Optional[str] = None,
        response_data: Optional[dict] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.code = code
        self.decline_code = decline_code
        self.response_data = response_data or {}
        super().__init__(message)

    @property
    def is_card_error(self) -> bool:
        return self.error_type == "card_error"


def payment_intent_id_from_secret(client_secret: str) -> str:
    """``pi_123_secret_abc`` -> ``pi_123``."""
    intent_id, sep, _ = client_secret.partition("_secret_")
    if not sep or not intent_id.startswith("pi_"):
        raise ValueError("Malformed PaymentIntent client secret")
    return intent_id


def _flatten(data: dict, prefix: str = "") -> dict[str, str]:
    """Encode nested dicts the way Stripe's form API expects (a[b]=c)."""
    flat: dict[str, str] = {}
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else key
        if value is None:
            continue
        if isinstance(value, dict):
            flat.update(_flatten(value, name))
        elif isinstance(value, bool):
            flat[name] = "true" if value else "false"
        else:
            flat[name] = str(value)
    return flat


class StripeClient:
    """Async client for the Stripe PaymentIntents API."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.STRIPE_SECRET_KEY
        if not self.secret_key:
            raise ValueError("STRIPE_SECRET_KEY is required")
        self.base_url = (base_url or settings.STRIPE_API_BASE).rstrip("/")
        self._transport = transport
        self._headers = {"Authorization": f"Bearer {self.secret_key}"}

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        form_data: Optional[dict] = None,
        idempotency_key: Optional[str] = None,
    ) -> dict:
        """Make an async request to the Stripe API."""
        headers = dict(self._headers)
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=30.0, transport=self._transport
            ) as client:
                response = await client.request(
                    method=method,
                    url=endpoint,
                    headers=headers,
                    params=params,
                    data=_flatten(form_data) if form_data else None,
                )
        except httpx.RequestError as e:
            logger.error(f"Stripe API unreachable: {type(e).__name__}: {e}")
            raise StripeError("Payment processor unreachable", error_type="api_connection_error") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            error = data.get("error") or {}
            logger.error(
                f"Stripe API error: {response.status_code} - "
                f"{error.get('type')}/{error.get('code')}"
            )
            raise StripeError(
                message=error.get("message", "Unknown Stripe error"),
                status_code=response.status_code,
                error_type=error.get("type"),
                code=error.get("code"),
                decline_code=error.get("decline_code"),
                response_data=data,
            )

        return data

    # =========================================================================
    # PaymentIntent Methods
    # =========================================================================

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Optional[dict] = None,
    ) -> PaymentIntent:
        """
        Reserve a charge for an exact amount.

        Args:
            amount: Amount in minor units (e.g. fils/cents)
            currency: Lowercase ISO currency code
            metadata: Optional key/value pairs stored on the intent

        Returns:
            PaymentIntent with client_secret for the payment element
        """
        data = await self._request(
            "POST",
            "/v1/payment_intents",
            form_data={
                "amount": amount,
                "currency": currency,
                "automatic_payment_methods": {"enabled": True},
                "metadata": metadata or None,
            },
        )
        return PaymentIntent.from_api(data)

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        """Fetch the current state of a PaymentIntent."""
        data = await self._request("GET", f"/v1/payment_intents/{payment_intent_id}")
        return PaymentIntent.from_api(data)

    async def retrieve_by_client_secret(self, client_secret: str) -> PaymentIntent:
        """Look up a PaymentIntent from the secret echoed on redirect return."""
        intent_id = payment_intent_id_from_secret(client_secret)
        intent = await self.retrieve_payment_intent(intent_id)
        if intent.client_secret and intent.client_secret != client_secret:
            raise StripeError("Client secret does not match PaymentIntent", code="secret_mismatch")
        return intent

    async def confirm_payment_intent(
        self,
        payment_intent_id: str,
        payment_method: str,
        return_url: Optional[str] = None,
    ) -> PaymentIntent:
        """
        Confirm a PaymentIntent with a payment method.

        The result may be ``succeeded``, ``processing`` or ``requires_action``
        (3-D Secure redirect to ``return_url``).
        """
        form: dict = {"payment_method": payment_method}
        if return_url:
            form["return_url"] = return_url
        data = await self._request(
            "POST",
            f"/v1/payment_intents/{payment_intent_id}/confirm",
            form_data=form,
            idempotency_key=f"confirm-{payment_intent_id}-{payment_method}",
        )
        return PaymentIntent.from_api(data)


def get_stripe_client() -> StripeClient:
    """Get a StripeClient instance (FastAPI dependency)."""
    if not get_settings().STRIPE_SECRET_KEY:
        logger.error("STRIPE_SECRET_KEY is not configured")
        raise PaymentInitError(
            "Payment processor is not configured", code="missing_credentials"
        )
    return StripeClient()
