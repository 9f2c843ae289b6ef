# =============================================================================
# core/services/email_service.py - One-off Emails
# =============================================================================

import logging

from app.config import settings
from app.exceptions import ExternalServiceError, ServiceNotConfiguredError
from lib.emailer import EmailSendError, send_html_email
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class EmailService:
    """Service for emails sent by hand from the admin dashboard."""

    @staticmethod
    def send_direct_email(to: str, subject: str, html_body: str, sender: str | None = None) -> str:
        """
        Send an HTML email through SES and record it in email_send_log.

        Returns:
            The SES message ID

        Raises:
            ServiceNotConfiguredError: If SES credentials are missing
            ExternalServiceError: If SES rejects the message
        """
        if not settings.ses_configured:
            raise ServiceNotConfiguredError(
                "AWS SES",
                ["AWS_SES_ACCESS_KEY_ID", "AWS_SES_SECRET_ACCESS_KEY"],
            )

        logger.info(f"Sending direct email to {to}: {subject}")
        try:
            message_id = send_html_email(to, subject, html_body, sender=sender)
        except EmailSendError as e:
            logger.error(f"SES send failed for {to}: {e}")
            raise ExternalServiceError("SES", str(e))

        try:
            client = SupabaseClient.get_client()
            client.table("email_send_log").insert({
                "email": to,
                "subject": subject,
                "status": "sent",
            }).execute()
        except Exception as e:
            logger.warning(f"Email sent but not logged ({message_id}): {e}")

        return message_id
