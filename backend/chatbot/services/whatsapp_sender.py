"""Twilio WhatsApp message sender service.

Optional — gracefully skips when Twilio keys are empty or "placeholder".
"""
import asyncio
import logging
from typing import Protocol

from chatbot.config import get_settings
from chatbot.utils.pii_sanitizer import sanitize_phone_number

logger = logging.getLogger(__name__)

WHATSAPP_MAX_BODY = 1600


class WhatsAppError(Exception):
    """Raised when WhatsApp message sending fails."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ReplySender(Protocol):
    async def send(self, conversation_id: str, text: str) -> None: ...


def is_whatsapp_enabled() -> bool:
    """Check if Twilio WhatsApp is configured (not empty/placeholder)."""
    return get_settings().twilio_configured


def send_whatsapp_message(to: str, body: str) -> None:
    """Send a WhatsApp text message via Twilio.

    Args:
        to: Recipient phone number (e.g., "+923001234567").
        body: Message text (truncated to 1600 chars for WhatsApp).

    Raises:
        WhatsAppError: If Twilio rejects the message.
    """
    if not is_whatsapp_enabled():
        logger.warning("WhatsApp not configured — skipping send")
        return

    from twilio.base.exceptions import TwilioException
    from twilio.rest import Client

    settings = get_settings()
    client = Client(settings.twilio_account_sid, settings.twilio_auth_token)

    try:
        message = client.messages.create(
            from_=f"whatsapp:{settings.twilio_whatsapp_number}",
            to=f"whatsapp:{to}",
            body=body[:WHATSAPP_MAX_BODY],
        )
    except TwilioException as e:
        raise WhatsAppError(f"Twilio send failed: {e}") from e

    logger.info(f"WhatsApp message sent: sid={message.sid}, to={sanitize_phone_number(to)}")


class TwilioReplySender:
    """Reply sender backed by the Twilio REST API.

    The Twilio client is blocking, so sends run in a worker thread.
    """

    async def send(self, conversation_id: str, text: str) -> None:
        await asyncio.to_thread(send_whatsapp_message, conversation_id, text)
