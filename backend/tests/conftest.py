import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from chatbot.api.deps import get_dispatcher
from chatbot.config import get_settings
from chatbot.main import app
from chatbot.services.ai_gateway import AIGateway
from chatbot.services.commands import CommandRouter
from chatbot.services.context_store import ContextStore
from chatbot.services.dispatcher import MessageDispatcher

BOT_NUMBER = "+14155238886"


class FakeChatModel:
    """Stands in for a LangChain chat model.

    Each queued item is either a reply string, an AIMessage, or an exception
    to raise. Prompts are recorded for inspection.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def ainvoke(self, messages):
        self.prompts.append(messages[-1].content)
        if not self.replies:
            raise RuntimeError("FakeChatModel ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, AIMessage):
            return reply
        return AIMessage(content=reply)


class RecordingSender:
    """Reply sender that keeps every outbound message."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    async def send(self, conversation_id: str, text: str) -> None:
        self.sent.append((conversation_id, text))


class FailingSender(RecordingSender):
    async def send(self, conversation_id: str, text: str) -> None:
        self.sent.append((conversation_id, text))
        raise ConnectionError("transport down")


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Start every test from default settings, unaffected by the host env."""
    for name in (
        "LLM_API_KEY",
        "TWILIO_ACCOUNT_SID",
        "TWILIO_AUTH_TOKEN",
        "TWILIO_WHATSAPP_NUMBER",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def twilio_env(monkeypatch):
    """Configure Twilio credentials so the webhook is active."""
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC00000000000000000000000000000000")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "test-token")
    monkeypatch.setenv("TWILIO_WHATSAPP_NUMBER", BOT_NUMBER)
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
def store():
    return ContextStore(max_history=10)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def failing_sender():
    return FailingSender()


@pytest.fixture
def fake_llm():
    return FakeChatModel()


@pytest.fixture
def gateway(fake_llm):
    return AIGateway(fake_llm, timeout_seconds=1.0)


@pytest.fixture
def make_dispatcher(store, sender):
    """Build a dispatcher with or without an AI gateway."""
    def _make(gateway=None, reply_sender=None):
        router = CommandRouter(store, ai_enabled=lambda: gateway is not None)
        return MessageDispatcher(
            store=store,
            router=router,
            sender=reply_sender or sender,
            gateway=gateway,
            persona="You are a test assistant.",
            context_window=5,
        )

    return _make


@pytest.fixture
def test_client(twilio_env, make_dispatcher, gateway):
    """FastAPI test client with the dispatcher swapped for a test one."""
    dispatcher = make_dispatcher(gateway)
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app) as client:
        client.dispatcher = dispatcher
        yield client
    app.dependency_overrides.clear()
