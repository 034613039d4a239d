import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import uvicorn

from chatbot.api.router import api_router
from chatbot.config import get_settings
from chatbot.services.ai_gateway import AIGateway
from chatbot.services.commands import CommandRouter
from chatbot.services.context_store import ContextStore
from chatbot.services.dispatcher import MessageDispatcher
from chatbot.services.llm_provider import get_chat_llm, is_ai_enabled
from chatbot.services.whatsapp_sender import TwilioReplySender, is_whatsapp_enabled
from chatbot.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_gateway() -> AIGateway | None:
    """Create the AI gateway, or None when no LLM is configured."""
    if not is_ai_enabled():
        logger.warning("LLM API key not found. AI features will be disabled.")
        return None

    try:
        gateway = AIGateway(get_chat_llm())
    except ValueError as e:
        logger.error(f"Failed to initialize AI service: {e}")
        return None

    logger.info("AI service initialized successfully")
    return gateway


def build_dispatcher() -> MessageDispatcher:
    """Wire the store, router, gateway and sender for one app instance."""
    settings = get_settings()
    store = ContextStore(max_history=settings.context_max_history)
    gateway = build_gateway()
    router = CommandRouter(
        store,
        ai_enabled=lambda: gateway is not None,
        transport_connected=is_whatsapp_enabled,
    )
    return MessageDispatcher(
        store=store,
        router=router,
        sender=TwilioReplySender(),
        gateway=gateway,
        context_window=settings.context_window,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    setup_logging(get_settings().log_level)
    logger.info("WhatsApp AI chatbot starting up...")
    app.state.dispatcher = build_dispatcher()
    yield
    logger.info("WhatsApp AI chatbot shutting down...")


app = FastAPI(
    title="WhatsApp AI Chatbot",
    description="Conversational WhatsApp bot backed by an LLM",
    version="1.0.0",
    lifespan=lifespan,
)

# Include API routes
app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "status": "error",
            "code": 422,
            "message": "Validation error. Please check your input.",
        },
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    logger.exception("Internal server error")
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "code": 500,
            "message": "An internal error occurred. Please try again later.",
        },
    )


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run("chatbot.main:app", host=settings.host, port=settings.port)
