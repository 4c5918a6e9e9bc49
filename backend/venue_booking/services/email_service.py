"""
Booking confirmation emails through the Resend HTTP API.

Delivery is fire-and-forget: there is no retry, and callers treat any
exception as non-fatal. When the API key or sender address is not
configured the send is skipped with a log line.
"""

from pathlib import Path
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from venue_booking.core.config import get_settings
from venue_booking.core.logging import get_logger
from venue_booking.core.metrics import record_email
from venue_booking.schemas.booking import BookingConfirmationEmail

logger = get_logger(__name__)

_email_templates = Environment(
    loader=FileSystemLoader(str(Path(__file__).resolve().parent.parent / "templates")),
    autoescape=select_autoescape(["html"]),
)


def _venue_line(payload: BookingConfirmationEmail) -> str:
    if payload.venue_address:
        return f"{payload.venue_name} - {payload.venue_address}"
    return payload.venue_name


def render_subject(payload: BookingConfirmationEmail) -> str:
    return f"Your booking request for {payload.venue_name}"


def render_text(payload: BookingConfirmationEmail, organization: str) -> str:
    return "\n".join([
        f"Hello {payload.requester_name},",
        "",
        "Thank you for submitting a booking request. Here is a summary of your request:",
        "",
        f"Venue: {_venue_line(payload)}",
        f"Date: {payload.event_date}",
        f"Start time: {payload.start_time}",
        f"End time: {payload.end_time}",
        "",
        "Our team will review your request and contact you.",
        "",
        "Best regards,",
        organization,
    ])


def render_html(payload: BookingConfirmationEmail, organization: str) -> str:
    return _email_templates.get_template("email_confirmation.html").render(
        payload=payload,
        venue_line=_venue_line(payload),
        organization=organization,
    )


def is_configured() -> bool:
    settings = get_settings()
    return bool(settings.RESEND_API_KEY and settings.BOOKING_FROM_EMAIL)


async def send_booking_confirmation(
    payload: BookingConfirmationEmail,
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """
    Send the confirmation email. Returns True if the provider accepted it,
    False if sending was skipped because email is not configured.

    Raises httpx.HTTPError on transport failures or non-2xx responses.
    """
    settings = get_settings()
    if not is_configured():
        logger.warning("email_skipped", reason="resend_not_configured", to=payload.to)
        record_email("skipped")
        return False

    body = {
        "from": settings.BOOKING_FROM_EMAIL,
        "to": [payload.to],
        "subject": render_subject(payload),
        "text": render_text(payload, settings.ORGANIZATION_NAME),
        "html": render_html(payload, settings.ORGANIZATION_NAME),
    }
    headers = {"Authorization": f"Bearer {settings.RESEND_API_KEY}"}

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(
            base_url=settings.RESEND_API_URL,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
        )
    try:
        response = await client.post("/emails", json=body, headers=headers)
        response.raise_for_status()
    except httpx.HTTPError:
        record_email("failed")
        raise
    finally:
        if owns_client:
            await client.aclose()

    record_email("sent")
    logger.info("email_sent", to=payload.to, provider_id=response.json().get("id"))
    return True
