"""Health and status endpoints."""
from fastapi import APIRouter, Depends

from chatbot.api.deps import get_dispatcher
from chatbot.config import get_settings
from chatbot.schemas.status import StatusResponse
from chatbot.services.dispatcher import MessageDispatcher
from chatbot.services.whatsapp_sender import is_whatsapp_enabled

router = APIRouter()


@router.get("/health")
async def health_check(dispatcher: MessageDispatcher = Depends(get_dispatcher)):
    """
    Health check endpoint.

    The bot degrades to fixed replies when the AI backend or Twilio is not
    configured, so those are reported but never make the service unhealthy.
    """
    settings = get_settings()
    checks = {
        "ai": "ok" if dispatcher.ai_enabled else "disabled",
        "whatsapp": "ok" if is_whatsapp_enabled() else "disabled",
    }

    return {
        "status": "healthy",
        "service": settings.service_name,
        "checks": checks,
    }


@router.get("/status", response_model=StatusResponse)
async def status(dispatcher: MessageDispatcher = Depends(get_dispatcher)):
    """Read-only snapshot of the bot's configuration and memory."""
    return StatusResponse(
        ai_enabled=dispatcher.ai_enabled,
        whatsapp_enabled=is_whatsapp_enabled(),
        conversations=len(dispatcher.store),
        uptime_seconds=dispatcher.router.uptime_seconds(),
    )
