"""Local `!` commands answered without the AI backend."""
import logging
import sys
import time
from collections.abc import Callable
from datetime import datetime

from chatbot.schemas.message import ConversationKind, InboundMessage
from chatbot.services.context_store import ContextStore

logger = logging.getLogger(__name__)

PING_REPLY = "🏓 Pong! Bot is working!"
CLEAR_REPLY = "🗑️ Conversation context cleared!"

HELP_REPLY = (
    "🤖 *WhatsApp AI Chatbot Commands:*\n\n"
    "• !ping - Test if bot is working\n"
    "• !help - Show this help message\n"
    "• !info - Get chat information\n"
    "• !time - Get current time\n"
    "• !clear - Clear conversation context\n"
    "• !status - Check AI service status\n\n"
    "💬 *Just send any message and I'll respond with AI!*"
)


def _flag(active: bool) -> str:
    return "✅ Active" if active else "❌ Disabled"


def memory_usage_mb() -> int:
    """Peak resident memory of this process in MB.

    Unix only: the `resource` module does not exist on Windows.
    """
    import resource

    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS, kilobytes elsewhere
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return round(peak / divisor)


class CommandRouter:
    """Exact-match command table.

    ``route`` returns the reply text for a command, or None when the message
    is not a command.
    """

    def __init__(
        self,
        store: ContextStore,
        ai_enabled: Callable[[], bool],
        transport_connected: Callable[[], bool] = lambda: True,
        clock: Callable[[], datetime] = datetime.now,
        started_at: float | None = None,
    ):
        self.store = store
        self.ai_enabled = ai_enabled
        self.transport_connected = transport_connected
        self.clock = clock
        self.started_at = time.monotonic() if started_at is None else started_at
        self._handlers: dict[str, Callable[[InboundMessage], str]] = {
            "!ping": self._ping,
            "!help": self._help,
            "!info": self._info,
            "!time": self._time,
            "!clear": self._clear,
            "!status": self._status,
        }

    @property
    def commands(self) -> list[str]:
        return list(self._handlers)

    def route(self, message: InboundMessage) -> str | None:
        handler = self._handlers.get(message.body.strip().lower())
        if handler is None:
            return None
        logger.info(f"Handling command {message.body.strip().lower()}")
        return handler(message)

    def uptime_seconds(self) -> int:
        return int(time.monotonic() - self.started_at)

    def _ping(self, message: InboundMessage) -> str:
        return PING_REPLY

    def _help(self, message: InboundMessage) -> str:
        return HELP_REPLY

    def _info(self, message: InboundMessage) -> str:
        is_group = message.conversation_kind == ConversationKind.GROUP
        return (
            "📊 *Chat Information:*\n\n"
            f"• Chat Name: {message.chat_name or 'N/A'}\n"
            f"• Contact Name: {message.sender_display_name or 'Unknown'}\n"
            f"• Phone Number: {message.sender_phone or 'N/A'}\n"
            f"• Is Group: {'Yes' if is_group else 'No'}\n"
            f"• Message Type: {message.kind.value}\n"
            f"• AI Service: {_flag(self.ai_enabled())}"
        )

    def _time(self, message: InboundMessage) -> str:
        return f"🕐 Current time: {self.clock().strftime('%Y-%m-%d %H:%M:%S')}"

    def _clear(self, message: InboundMessage) -> str:
        self.store.clear(message.conversation_id)
        return CLEAR_REPLY

    def _status(self, message: InboundMessage) -> str:
        connected = "✅ Connected" if self.transport_connected() else "❌ Not configured"
        return (
            "🔧 *Bot Status:*\n\n"
            f"• WhatsApp Client: {connected}\n"
            f"• AI Service: {_flag(self.ai_enabled())}\n"
            f"• Server Uptime: {self.uptime_seconds()} seconds\n"
            f"• Memory Usage: {memory_usage_mb()} MB"
        )
