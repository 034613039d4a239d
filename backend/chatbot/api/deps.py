from fastapi import Request

from chatbot.services.dispatcher import MessageDispatcher


def get_dispatcher(request: Request) -> MessageDispatcher:
    """FastAPI dependency: the dispatcher wired up in the app lifespan."""
    return request.app.state.dispatcher
