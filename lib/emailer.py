# =============================================================================
# lib/emailer.py - Transactional Email via AWS SES
# =============================================================================
# Sends single HTML emails through SES. Callers are responsible for logging
# the send in the database.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings

logger = logging.getLogger(__name__)


class EmailSendError(Exception):
    """Raised when SES rejects or fails to accept a message."""


_ses_client: Any = None


def get_ses_client() -> Any:
    global _ses_client
    if _ses_client is None:
        _ses_client = boto3.client(
            "ses",
            aws_access_key_id=settings.AWS_SES_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SES_SECRET_ACCESS_KEY,
            region_name=settings.AWS_SES_REGION,
        )
    return _ses_client


def send_html_email(to_email: str, subject: str, html_body: str, sender: str | None = None) -> str:
    """
    Send one HTML email.

    Returns:
        The SES message ID

    Raises:
        EmailSendError: If SES refuses the message
    """
    source = sender or settings.EMAIL_FROM
    try:
        response = get_ses_client().send_email(
            Source=source,
            Destination={"ToAddresses": [to_email]},
            Message={
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {"Html": {"Data": html_body, "Charset": "UTF-8"}},
            },
        )
    except (ClientError, BotoCoreError) as e:
        raise EmailSendError(str(e)) from e

    message_id = response.get("MessageId", "")
    logger.info(f"Sent email to {to_email} ({message_id})")
    return message_id
