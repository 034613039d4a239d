import enum

from pydantic import BaseModel

BROADCAST_CONVERSATION_ID = "status@broadcast"


class MessageKind(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    DOCUMENT = "document"
    AUDIO = "audio"
    PTT = "ptt"
    VIDEO = "video"
    OTHER = "other"


class ConversationKind(str, enum.Enum):
    INDIVIDUAL = "individual"
    GROUP = "group"


MEDIA_KINDS = {
    MessageKind.IMAGE,
    MessageKind.DOCUMENT,
    MessageKind.AUDIO,
    MessageKind.PTT,
    MessageKind.VIDEO,
}


class InboundMessage(BaseModel):
    """A single message delivered by the chat transport."""

    conversation_id: str
    body: str = ""
    kind: MessageKind = MessageKind.TEXT
    sender_is_self: bool = False
    sender_display_name: str | None = None
    sender_phone: str | None = None
    conversation_kind: ConversationKind = ConversationKind.INDIVIDUAL
    chat_name: str | None = None

    @property
    def is_broadcast(self) -> bool:
        return self.conversation_id == BROADCAST_CONVERSATION_ID
