"""
Core email sending over the Resend HTTP API.
"""

from typing import Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

_DEFAULT_TIMEOUT = 30.0


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    from_email: Optional[str] = None,
) -> bool:
    """
    Send an email through Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        body: Plain text body
        html_body: Optional HTML body
        from_email: Sender address (defaults to EMAIL_FROM)

    Returns:
        True if Resend accepted the message, False if sending is not configured.

    Raises:
        httpx.HTTPError when the API is unreachable or rejects the message.
    """
    settings = get_settings()

    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not configured - email not sent")
        logger.info(f"Would have sent email to {to_email}: {subject}")
        return False

    payload = {
        "from": from_email or settings.EMAIL_FROM,
        "to": [to_email],
        "subject": subject,
        "text": body,
    }
    if html_body:
        payload["html"] = html_body

    logger.info(f"Sending email to {to_email}: {subject}")

    async with httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT) as client:
        response = await client.post(
            f"{settings.RESEND_API_URL}/emails",
            json=payload,
            headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
        )
        response.raise_for_status()

    logger.info(f"Email sent successfully to {to_email}")
    return True
