# =============================================================================
# app/routers/emails.py - Direct Email Endpoint
# =============================================================================

import logging

from fastapi import APIRouter

from app.dependencies import AdminUser
from core.models.crm import DirectEmail, DirectEmailResult
from core.services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/send", response_model=DirectEmailResult, response_model_by_alias=True)
async def send_direct_email(request: DirectEmail, admin: AdminUser):
    """
    Send a one-off HTML email.

    Returns 503 if SES isn't configured and 502 if SES refuses the message.
    """
    logger.info(f"Admin {admin.id} sending email to {request.to}")
    message_id = EmailService.send_direct_email(
        request.to,
        request.subject,
        request.html_body,
        sender=request.sender,
    )
    return DirectEmailResult(message_id=message_id)
