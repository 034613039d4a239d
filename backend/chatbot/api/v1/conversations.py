"""Conversation management hooks for the host."""
from fastapi import APIRouter, Depends

from chatbot.api.deps import get_dispatcher
from chatbot.schemas.status import ClearConversationResponse
from chatbot.services.dispatcher import MessageDispatcher

router = APIRouter()


@router.delete("/{conversation_id}", response_model=ClearConversationResponse)
async def clear_conversation(
    conversation_id: str,
    dispatcher: MessageDispatcher = Depends(get_dispatcher),
):
    """Forget a conversation's history."""
    cleared = dispatcher.store.clear(conversation_id)
    return ClearConversationResponse(conversation_id=conversation_id, cleared=cleared)
