from fastapi import APIRouter

from chatbot.api.v1 import conversations, health, whatsapp

api_router = APIRouter(prefix="/v1")

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(whatsapp.router, tags=["WhatsApp"])
api_router.include_router(conversations.router, prefix="/conversations", tags=["Conversations"])
