"""WhatsApp webhook endpoint for Twilio integration.

Receives incoming WhatsApp messages and hands them to the dispatcher in a
background task, so Twilio gets its (empty) TwiML response right away.
"""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Response

from chatbot.api.deps import get_dispatcher
from chatbot.config import get_settings
from chatbot.schemas.message import ConversationKind, InboundMessage, MessageKind
from chatbot.services.dispatcher import MessageDispatcher
from chatbot.services.whatsapp_sender import is_whatsapp_enabled
from chatbot.utils.pii_sanitizer import sanitize_phone_number

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/whatsapp")

EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?><Response></Response>'

# Twilio MessageType values that map onto our kinds
TWILIO_MESSAGE_TYPES = {
    "text": MessageKind.TEXT,
    "image": MessageKind.IMAGE,
    "document": MessageKind.DOCUMENT,
    "audio": MessageKind.AUDIO,
    "video": MessageKind.VIDEO,
}


def strip_whatsapp_prefix(address: str) -> str:
    return address.removeprefix("whatsapp:")


def message_kind_from(
    message_type: str | None, num_media: int, content_type: str | None
) -> MessageKind:
    """Resolve the message kind from Twilio's MessageType or media content type."""
    if message_type and message_type.lower() in TWILIO_MESSAGE_TYPES:
        return TWILIO_MESSAGE_TYPES[message_type.lower()]

    if num_media > 0 and content_type:
        major = content_type.split("/", 1)[0].lower()
        if major == "image":
            return MessageKind.IMAGE
        if major == "audio":
            return MessageKind.AUDIO
        if major == "video":
            return MessageKind.VIDEO
        return MessageKind.DOCUMENT

    if message_type:
        return MessageKind.OTHER
    return MessageKind.TEXT


@router.post("/webhook")
async def whatsapp_webhook(
    background_tasks: BackgroundTasks,
    From: str = Form(...),
    To: str = Form(""),
    Body: str = Form(""),
    NumMedia: int = Form(0),
    MediaContentType0: str | None = Form(None),
    ProfileName: str | None = Form(None),
    MessageType: str | None = Form(None),
    dispatcher: MessageDispatcher = Depends(get_dispatcher),
):
    """Twilio WhatsApp webhook — receives incoming messages."""
    if not is_whatsapp_enabled():
        return Response(content=EMPTY_TWIML, media_type="text/xml")

    settings = get_settings()
    phone = strip_whatsapp_prefix(From)
    # Fall back to the number Twilio delivered to when ours isn't configured
    bot_number = strip_whatsapp_prefix(settings.twilio_whatsapp_number or To)

    message = InboundMessage(
        conversation_id=phone,
        body=Body,
        kind=message_kind_from(MessageType, NumMedia, MediaContentType0),
        sender_is_self=bool(bot_number) and phone == bot_number,
        sender_display_name=ProfileName or None,
        sender_phone=phone,
        conversation_kind=ConversationKind.INDIVIDUAL,
        chat_name=ProfileName or None,
    )
    logger.info(
        f"WhatsApp message from {sanitize_phone_number(phone)}: "
        f"kind={message.kind.value}, NumMedia={NumMedia}"
    )

    background_tasks.add_task(dispatcher.handle, message)

    # Replies go out via the REST API, not TwiML
    return Response(content=EMPTY_TWIML, media_type="text/xml")
