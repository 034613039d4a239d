"""Prompt assembly for conversational replies.

``assemble`` builds the structured request; ``render_prompt`` turns it into
the single text prompt sent to the chat model.
"""
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from chatbot.schemas.conversation import GenerationRequest, PromptMetadata, Turn

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

DEFAULT_CONTEXT_WINDOW = 5
FINAL_INSTRUCTION = "Please respond as the AI assistant:"


@lru_cache
def load_prompt(name: str) -> str:
    """Load a prompt template from the prompts directory."""
    prompt_path = PROMPTS_DIR / name
    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt file not found: {prompt_path}")
    return prompt_path.read_text(encoding="utf-8")


def load_persona() -> str:
    """Load the system persona used for every conversation."""
    return load_prompt("persona.txt").strip()


def assemble(
    persona: str,
    metadata: PromptMetadata,
    recent_turns: Sequence[Turn],
    user_message: str,
    window: int = DEFAULT_CONTEXT_WINDOW,
) -> GenerationRequest:
    """Build a generation request from a history snapshot.

    Only the last ``window`` turns are kept. The caller's sequence is
    never modified.
    """
    turns = tuple(recent_turns)[-window:] if window > 0 else ()
    return GenerationRequest(
        system_persona=persona,
        metadata=metadata,
        recent_turns=turns,
        user_message=user_message,
    )


def render_prompt(request: GenerationRequest) -> str:
    """Serialize a request into prompt text.

    Layout: persona block, metadata lines, transcript, current message,
    final instruction.
    """
    lines = [request.system_persona, ""]

    if request.metadata.display_name:
        lines.append(f"User's name: {request.metadata.display_name}")
    if request.metadata.kind is not None:
        lines.append(f"Chat type: {request.metadata.kind.value}")

    if request.recent_turns:
        lines.append("Recent conversation context:")
        for turn in request.recent_turns:
            lines.append(f"{turn.speaker_label}: {turn.text}")
        lines.append("")

    lines.append(f"Current user message: {request.user_message}")
    lines.append("")
    lines.append(FINAL_INSTRUCTION)
    return "\n".join(lines)
