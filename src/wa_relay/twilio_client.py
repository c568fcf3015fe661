from __future__ import annotations

from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from .config import get_settings
from .errors import MessagingError


def get_twilio_client() -> Client:
    settings = get_settings()

    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        raise RuntimeError(
            "Twilio credentials are not configured (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN)"
        )

    return Client(
        settings.twilio_account_sid,
        settings.twilio_auth_token,
        http_client=TwilioHttpClient(timeout=settings.send_timeout),
    )


def whatsapp_address(number: str) -> str:
    """Turn "918928417703" or "+918928417703" into "whatsapp:+918928417703"."""
    if number.startswith("whatsapp:"):
        return number
    return f"whatsapp:+{number.lstrip('+')}"


def send_whatsapp(to: str, body: str) -> None:
    """
    Send a WhatsApp reply using the configured Twilio account.

    This is the alternate provider, selected with MESSAGING_PROVIDER=twilio.
    """
    settings = get_settings()
    if not settings.twilio_whatsapp_from:
        raise RuntimeError("TWILIO_WHATSAPP_FROM is not configured")

    client = get_twilio_client()
    try:
        client.messages.create(
            to=whatsapp_address(to),
            from_=whatsapp_address(settings.twilio_whatsapp_from),
            body=body,
        )
    except TwilioException as e:
        raise MessagingError("twilio", str(e)) from e
