"""In-memory conversation context store.

Keeps a bounded rolling history per conversation. One store is created
per app instance and handed to the dispatcher; nothing survives a restart.
"""
import logging

from chatbot.schemas.conversation import (
    ASSISTANT_LABEL,
    DEFAULT_DISPLAY_NAME,
    ConversationContext,
    Turn,
)
from chatbot.schemas.message import ConversationKind
from chatbot.utils.pii_sanitizer import sanitize_text

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 10


class ContextStore:
    """Per-conversation sliding-window memory."""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY):
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self.max_history = max_history
        self._contexts: dict[str, ConversationContext] = {}

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._contexts

    def get(
        self,
        conversation_id: str,
        display_name: str | None = None,
        kind: ConversationKind = ConversationKind.INDIVIDUAL,
    ) -> ConversationContext:
        """Return the context for a conversation, creating it on first use.

        ``display_name`` and ``kind`` only apply when the context is created.
        """
        context = self._contexts.get(conversation_id)
        if context is None:
            context = ConversationContext(
                conversation_id=conversation_id,
                display_name=display_name or DEFAULT_DISPLAY_NAME,
                kind=kind,
            )
            self._contexts[conversation_id] = context
            logger.debug(f"Created context for {sanitize_text(conversation_id)}")
        return context

    def append_user(
        self, conversation_id: str, text: str, context: ConversationContext | None = None
    ) -> Turn | None:
        """Append a user turn.

        When ``context`` is given the turn is only recorded if that context is
        still the stored one; a cleared conversation is never recreated.
        """
        context = self._resolve(conversation_id, context)
        if context is None:
            return None
        return self._append(context, Turn(speaker_label=context.display_name, text=text))

    def append_assistant(
        self, conversation_id: str, text: str, context: ConversationContext | None = None
    ) -> Turn | None:
        context = self._resolve(conversation_id, context)
        if context is None:
            return None
        return self._append(context, Turn(speaker_label=ASSISTANT_LABEL, text=text))

    def snapshot(self, conversation_id: str, limit: int | None = None) -> list[Turn]:
        """Copy of the most recent turns, oldest first."""
        context = self._contexts.get(conversation_id)
        if context is None:
            return []
        turns = list(context.history)
        if limit is not None:
            turns = turns[-limit:] if limit > 0 else []
        return turns

    def clear(self, conversation_id: str) -> bool:
        """Drop a conversation entirely. Returns True if it existed."""
        removed = self._contexts.pop(conversation_id, None) is not None
        if removed:
            logger.info(f"Cleared context for {sanitize_text(conversation_id)}")
        return removed

    def _resolve(
        self, conversation_id: str, context: ConversationContext | None
    ) -> ConversationContext | None:
        if context is None:
            return self.get(conversation_id)
        if self._contexts.get(conversation_id) is not context:
            logger.info(
                f"Dropping turn for cleared context {sanitize_text(conversation_id)}"
            )
            return None
        return context

    def _append(self, context: ConversationContext, turn: Turn) -> Turn:
        context.history.append(turn)
        overflow = len(context.history) - self.max_history
        if overflow > 0:
            # FIFO: oldest turns go first
            del context.history[:overflow]
        return turn
