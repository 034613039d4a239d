"""
Unit tests for the in-memory conversation context store.
"""
import pytest

from chatbot.schemas.conversation import ASSISTANT_LABEL
from chatbot.schemas.message import ConversationKind
from chatbot.services.context_store import ContextStore


class TestContextCreation:
    """get() creates contexts lazily and keeps creation-time metadata."""

    def test_get_creates_empty_context(self, store):
        context = store.get("chat-1", display_name="Alice", kind=ConversationKind.GROUP)

        assert context.conversation_id == "chat-1"
        assert context.display_name == "Alice"
        assert context.kind == ConversationKind.GROUP
        assert context.history == []
        assert "chat-1" in store
        assert len(store) == 1

    def test_metadata_only_applies_on_creation(self, store):
        store.get("chat-1", display_name="Alice")
        context = store.get("chat-1", display_name="Bob", kind=ConversationKind.GROUP)

        assert context.display_name == "Alice"
        assert context.kind == ConversationKind.INDIVIDUAL

    def test_missing_display_name_uses_default_label(self, store):
        assert store.get("chat-1").display_name == "User"

    def test_rejects_non_positive_max_history(self):
        with pytest.raises(ValueError):
            ContextStore(max_history=0)


class TestHistoryBounds:
    """History never exceeds max_history and evicts oldest first."""

    def test_fifo_eviction(self, store):
        store.get("chat-1", display_name="Alice")
        for i in range(25):
            store.append_user("chat-1", f"message {i}")
            assert len(store.get("chat-1").history) <= 10

        texts = [turn.text for turn in store.get("chat-1").history]
        assert texts == [f"message {i}" for i in range(15, 25)]

    def test_turn_labels(self, store):
        store.get("chat-1", display_name="Alice")
        user_turn = store.append_user("chat-1", "Hello")
        assistant_turn = store.append_assistant("chat-1", "Hi there!")

        assert user_turn.speaker_label == "Alice"
        assert assistant_turn.speaker_label == ASSISTANT_LABEL
        assert user_turn.occurred_at <= assistant_turn.occurred_at

    def test_custom_bound(self):
        small = ContextStore(max_history=3)
        for i in range(5):
            small.append_assistant("chat-1", str(i))

        assert [t.text for t in small.get("chat-1").history] == ["2", "3", "4"]


class TestSnapshot:
    def test_snapshot_returns_last_turns_in_order(self, store):
        for i in range(8):
            store.append_user("chat-1", str(i))

        assert [t.text for t in store.snapshot("chat-1", 5)] == ["3", "4", "5", "6", "7"]

    def test_snapshot_is_a_copy(self, store):
        store.append_user("chat-1", "hello")
        snapshot = store.snapshot("chat-1")
        snapshot.clear()

        assert len(store.get("chat-1").history) == 1

    def test_snapshot_of_unknown_conversation(self, store):
        assert store.snapshot("nobody", 5) == []
        assert "nobody" not in store


class TestClear:
    def test_clear_then_get_is_empty(self, store):
        store.get("chat-1", display_name="Alice")
        store.append_user("chat-1", "one")
        store.append_assistant("chat-1", "two")

        assert store.clear("chat-1") is True
        assert "chat-1" not in store
        assert store.get("chat-1").history == []

    def test_clear_unknown_conversation(self, store):
        assert store.clear("nobody") is False

    def test_clear_leaves_other_conversations(self, store):
        store.append_user("chat-1", "one")
        store.append_user("chat-2", "two")
        store.clear("chat-1")

        assert [t.text for t in store.get("chat-2").history] == ["two"]


class TestStaleContext:
    """Appends bound to a context that was cleared are dropped."""

    def test_append_to_cleared_context_is_dropped(self, store):
        context = store.get("chat-1", display_name="Alice")
        store.clear("chat-1")

        assert store.append_assistant("chat-1", "late", context=context) is None
        assert store.append_user("chat-1", "late", context=context) is None
        assert "chat-1" not in store

    def test_append_to_replaced_context_is_dropped(self, store):
        old = store.get("chat-1", display_name="Alice")
        store.clear("chat-1")
        store.get("chat-1", display_name="Alice")

        store.append_assistant("chat-1", "late", context=old)

        assert store.get("chat-1").history == []

    def test_append_to_live_context(self, store):
        context = store.get("chat-1", display_name="Alice")

        turn = store.append_user("chat-1", "Hello", context=context)

        assert turn.speaker_label == "Alice"
        assert [t.text for t in store.get("chat-1").history] == ["Hello"]
