from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Read-only snapshot of the bot for the host."""

    ai_enabled: bool
    whatsapp_enabled: bool
    conversations: int
    uptime_seconds: int


class ClearConversationResponse(BaseModel):
    status: str = "success"
    conversation_id: str
    cleared: bool
