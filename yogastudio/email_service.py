"""
Email delivery through Resend with MJML templates.

Route handlers never call `send_email` directly: they queue one of the
`notify_*` coroutines as a background task. Those log failures instead of
raising, so a mail outage cannot fail a booking.
"""

import logging
from typing import Optional, Union
from urllib.parse import quote

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, FRONTEND_URL, RESEND_API_KEY
from .email_templates import (
    class_booking_confirmation_template,
    class_cancelled_template,
    newsletter_template,
    query_received_template,
    query_response_template,
    waitlist_confirmation_template,
    waitlist_promotion_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfiguredError(Exception):
    pass


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        return html if html is not None else str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Resend response dict
    """
    if not RESEND_API_KEY:
        raise EmailNotConfiguredError("Email service not configured - RESEND_API_KEY missing")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


async def _deliver(to: str, subject: str, mjml_content: str) -> bool:
    try:
        await send_email(to=to, subject=subject, mjml_content=mjml_content)
        return True
    except EmailNotConfiguredError:
        logger.info(f"📭 Email disabled, skipped '{subject}' to {to}")
    except Exception as e:
        logger.error(f"❌ Notification '{subject}' to {to} failed: {e}")
    return False


# ============================================
# Notifications queued as background tasks
# ============================================


async def notify_class_booking(to: str, first_name: str, class_name: str, instructor: str, when: str) -> bool:
    return await _deliver(
        to,
        f"Booking confirmed: {class_name}",
        class_booking_confirmation_template(first_name, class_name, instructor, when),
    )


async def notify_waitlisted(to: str, first_name: str, class_name: str, when: str, position: int) -> bool:
    return await _deliver(
        to,
        f"Waitlist: {class_name}",
        waitlist_confirmation_template(first_name, class_name, when, position),
    )


async def notify_waitlist_promoted(to: str, first_name: str, class_name: str, when: str) -> bool:
    return await _deliver(
        to,
        f"You're in: {class_name}",
        waitlist_promotion_template(first_name, class_name, when),
    )


async def notify_class_cancelled(to: str, first_name: str, class_name: str, when: str) -> bool:
    return await _deliver(
        to,
        f"Cancelled: {class_name}",
        class_cancelled_template(first_name, class_name, when),
    )


async def notify_query_received(to: str, name: str, subject: str) -> bool:
    return await _deliver(to, "We received your question", query_received_template(name, subject))


async def notify_query_response(to: str, name: str, subject: str, response: str) -> bool:
    return await _deliver(
        to, f"Re: {subject}", query_response_template(name, subject, response)
    )


async def send_newsletter_issue(recipients: list[str], subject: str, title: str, content_html: str) -> int:
    """Send one newsletter issue; returns how many deliveries succeeded"""
    delivered = 0
    for email in recipients:
        unsubscribe_url = f"{FRONTEND_URL}/newsletter/unsubscribe?email={quote(email)}"
        if await _deliver(email, subject, newsletter_template(title, content_html, unsubscribe_url)):
            delivered += 1
    logger.info(f"📨 Newsletter '{subject}' delivered to {delivered}/{len(recipients)} subscribers")
    return delivered
