"""Message dispatcher.

Decides how each inbound message is answered: local command, media
acknowledgment, or an AI reply backed by the conversation's history.
Every handled message gets exactly one reply.
"""
import logging

from chatbot.schemas.conversation import GenerationSuccess, PromptMetadata
from chatbot.schemas.message import MEDIA_KINDS, InboundMessage, MessageKind
from chatbot.services.ai_gateway import AIGateway
from chatbot.services.commands import CommandRouter
from chatbot.services.context_store import ContextStore
from chatbot.services.prompt_assembler import DEFAULT_CONTEXT_WINDOW, assemble, load_persona
from chatbot.services.whatsapp_sender import ReplySender
from chatbot.utils.pii_sanitizer import sanitize_text

logger = logging.getLogger(__name__)

AI_DISABLED_MSG = "🤖 AI service is currently disabled. Please configure your API key."
UNEXPECTED_ERROR_MSG = "❌ Sorry, there was an unexpected error."

MEDIA_DISABLED_MSGS = {
    "image": "📸 Nice image! Unfortunately, AI features are currently disabled.",
    "document": "📄 Thanks for the document! AI analysis is currently unavailable.",
    "audio": "🎵 Got your audio message! AI features are currently disabled.",
    "video": "🎥 Thanks for the video! AI analysis is currently unavailable.",
}


def media_label(kind: MessageKind) -> str:
    """Voice notes (ptt) are treated as audio."""
    return "audio" if kind == MessageKind.PTT else kind.value


class MessageDispatcher:
    def __init__(
        self,
        store: ContextStore,
        router: CommandRouter,
        sender: ReplySender,
        gateway: AIGateway | None = None,
        persona: str | None = None,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
    ):
        self.store = store
        self.router = router
        self.sender = sender
        self.gateway = gateway
        self.persona = persona if persona is not None else load_persona()
        self.context_window = context_window

    @property
    def ai_enabled(self) -> bool:
        return self.gateway is not None

    async def handle(self, message: InboundMessage) -> str | None:
        """Process one inbound message.

        Returns the reply that was sent, or None when the message was
        ignored. Never raises.
        """
        if message.is_broadcast or message.sender_is_self:
            return None

        chat = sanitize_text(message.conversation_id)
        logger.info(f"Received {message.kind.value} message from {chat}")

        try:
            reply = await self._route(message)
        except Exception:
            logger.exception(f"Error handling message from {chat}")
            reply = UNEXPECTED_ERROR_MSG

        if reply:
            await self._send(message.conversation_id, reply)
        return reply

    async def _route(self, message: InboundMessage) -> str | None:
        command_reply = self.router.route(message)
        if command_reply is not None:
            return command_reply

        if message.kind in MEDIA_KINDS:
            label = media_label(message.kind)
            if self.gateway is None:
                return MEDIA_DISABLED_MSGS[label]
            return await self.gateway.generate_acknowledgment(label)

        if message.kind == MessageKind.TEXT and message.body.strip():
            if self.gateway is None:
                return AI_DISABLED_MSG
            return await self._reply_with_ai(message)

        return None

    async def _reply_with_ai(self, message: InboundMessage) -> str:
        context = self.store.get(
            message.conversation_id,
            display_name=message.sender_display_name,
            kind=message.conversation_kind,
        )
        self.store.append_user(message.conversation_id, message.body, context=context)

        request = assemble(
            self.persona,
            PromptMetadata(display_name=context.display_name, kind=context.kind),
            self.store.snapshot(message.conversation_id, self.context_window),
            message.body,
            window=self.context_window,
        )
        outcome = await self.gateway.generate(request)

        if isinstance(outcome, GenerationSuccess):
            self.store.append_assistant(message.conversation_id, outcome.text, context=context)
            logger.info(
                f"AI response generated for {sanitize_text(message.conversation_id)}: "
                f"tokens={outcome.usage.model_dump()}, response_length={len(outcome.text)}"
            )
            return outcome.text

        logger.error(f"AI generation failed ({outcome.kind.value}): {outcome.message}")
        return outcome.fallback_text

    async def _send(self, conversation_id: str, text: str) -> None:
        try:
            await self.sender.send(conversation_id, text)
        except Exception:
            # Transport failures belong to the transport; one attempt only
            logger.exception(f"Failed to send reply to {sanitize_text(conversation_id)}")
