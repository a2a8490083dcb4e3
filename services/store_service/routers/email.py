"""Transactional email router."""

from fastapi import APIRouter, HTTPException
from libs.common.emails.core import NotificationError, send_email
from services.store_service.schemas import SendEmailRequest, SendEmailResponse

router = APIRouter(tags=["email"])


@router.post("/send-email", response_model=SendEmailResponse)
async def send_email_endpoint(request: SendEmailRequest):
    """Send an email through the configured sender."""
    try:
        data = await send_email(
            to_email=request.to,
            subject=request.subject,
            html_body=request.html,
            from_email=request.from_,
        )
    except NotificationError as e:
        raise HTTPException(status_code=502, detail=e.message) from e
    return SendEmailResponse(data=data)
