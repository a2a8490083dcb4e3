"""
Core email sending utilities using the Resend HTTP API.
"""

from typing import Any, Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


class NotificationError(Exception):
    """Raised when a transactional email could not be handed to the sender."""

    def __init__(
        self, message: str, status_code: Optional[int] = None, response_data: Optional[dict] = None
    ):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


def default_sender() -> str:
    settings = get_settings()
    return f"{settings.DEFAULT_FROM_NAME} <{settings.DEFAULT_FROM_EMAIL}>"


async def send_email(
    to_email: str | list[str],
    subject: str,
    html_body: str,
    text_body: Optional[str] = None,
    from_email: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[str, Any]:
    """
    Send an email through Resend.

    Args:
        to_email: Recipient address (or list of addresses)
        subject: Email subject line
        html_body: HTML body
        text_body: Optional plain-text alternative
        from_email: Sender, e.g. "Joulaa <noreply@joulaa.com>" (defaults to settings)
        transport: Optional httpx transport (tests)

    Returns:
        The Resend response payload (contains the message ``id``)

    Raises:
        NotificationError: sender not configured, rejected, or unreachable
    """
    settings = get_settings()
    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not configured - email not sent")
        logger.info(f"Would have sent email to {to_email}: {subject}")
        raise NotificationError("Email sender is not configured")

    payload: dict[str, Any] = {
        "from": from_email or default_sender(),
        "to": to_email if isinstance(to_email, list) else [to_email],
        "subject": subject,
        "html": html_body,
    }
    if text_body:
        payload["text"] = text_body

    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }

    logger.info(f"Sending email to {to_email}: {subject}")
    try:
        async with httpx.AsyncClient(
            base_url=settings.RESEND_API_BASE, timeout=30.0, transport=transport
        ) as client:
            response = await client.post("/emails", json=payload, headers=headers)
    except httpx.RequestError as e:
        logger.error(f"Failed to reach email sender: {type(e).__name__}: {e}")
        raise NotificationError("Email sender unreachable") from e

    try:
        data = response.json()
    except ValueError:
        data = {}

    if not response.is_success:
        logger.error(f"Resend API error: {response.status_code} - {data}")
        raise NotificationError(
            data.get("message", "Failed to send email"),
            status_code=response.status_code,
            response_data=data,
        )

    logger.info(f"Email sent successfully to {to_email}")
    return data
