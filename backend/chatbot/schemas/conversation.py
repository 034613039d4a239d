"""Conversation memory and generation data shapes."""
import enum
from datetime import datetime, timezone
from typing import Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from chatbot.schemas.message import ConversationKind

ASSISTANT_LABEL = "AI Assistant"
DEFAULT_DISPLAY_NAME = "User"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Turn(BaseModel):
    """One labeled message in a conversation's rolling history."""

    model_config = ConfigDict(frozen=True)

    speaker_label: str
    text: str
    occurred_at: datetime = Field(default_factory=_utcnow)


class ConversationContext(BaseModel):
    conversation_id: str
    display_name: str = DEFAULT_DISPLAY_NAME
    kind: ConversationKind = ConversationKind.INDIVIDUAL
    history: list[Turn] = Field(default_factory=list)


class PromptMetadata(BaseModel):
    display_name: str | None = None
    kind: ConversationKind | None = None


class GenerationRequest(BaseModel):
    """Everything the AI gateway needs for one reply. Assembled, never stored."""

    model_config = ConfigDict(frozen=True)

    system_persona: str
    metadata: PromptMetadata = Field(default_factory=PromptMetadata)
    recent_turns: tuple[Turn, ...] = ()
    user_message: str


class TokenUsage(BaseModel):
    prompt: int = 0
    completion: int = 0
    total: int = 0


class FailureKind(str, enum.Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    QUOTA_EXCEEDED = "quota_exceeded"
    SAFETY_BLOCKED = "safety_blocked"
    UNKNOWN = "unknown"


class GenerationSuccess(BaseModel):
    status: Literal["success"] = "success"
    text: str
    usage: TokenUsage = Field(default_factory=TokenUsage)


class GenerationFailure(BaseModel):
    status: Literal["failure"] = "failure"
    kind: FailureKind
    message: str
    fallback_text: str


GenerationOutcome = GenerationSuccess | GenerationFailure


class MessageAnalysis(NamedTuple):
    """Sentiment/intent judgment for a single message."""

    sentiment: str
    intent: str
    confidence: float
