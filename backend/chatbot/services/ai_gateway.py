"""AI gateway around the chat model.

Normalizes model output and failures into typed outcomes. Nothing raised by
the backend escapes ``generate``, ``generate_acknowledgment`` or ``classify``.
"""
import asyncio
import json
import logging
from collections.abc import Callable, Iterable, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage

from chatbot.config import Settings, get_settings
from chatbot.schemas.conversation import (
    FailureKind,
    GenerationFailure,
    GenerationOutcome,
    GenerationRequest,
    GenerationSuccess,
    MessageAnalysis,
    TokenUsage,
)
from chatbot.services.prompt_assembler import load_prompt, render_prompt

logger = logging.getLogger(__name__)

ErrorPredicate = Callable[[str], bool]
ErrorRule = tuple[ErrorPredicate, FailureKind]

FALLBACK_TEXTS = {
    FailureKind.INVALID_CREDENTIALS: "❌ Sorry, there's an issue with the AI service configuration.",
    FailureKind.QUOTA_EXCEEDED: "⚠️ AI service is temporarily unavailable due to quota limits.",
    FailureKind.SAFETY_BLOCKED: "🚫 Sorry, I cannot respond to that type of content.",
    FailureKind.UNKNOWN: "😅 Sorry, I'm having trouble processing that right now. Please try again!",
}

FAILURE_MESSAGES = {
    FailureKind.INVALID_CREDENTIALS: "Invalid API key. Please check your LLM API configuration.",
    FailureKind.QUOTA_EXCEEDED: "API quota exceeded.",
    FailureKind.SAFETY_BLOCKED: "Content filtered by safety settings.",
}

ACKNOWLEDGMENT_PROMPTS = {
    "image": (
        "The user sent an image. Generate a friendly response acknowledging "
        "the image and asking if they need help with anything related to it."
    ),
    "document": (
        "The user sent a document. Generate a helpful response offering to "
        "help them with document-related questions."
    ),
    "audio": (
        "The user sent an audio message. Generate a friendly response "
        "acknowledging the audio and offering assistance."
    ),
    "video": (
        "The user sent a video. Generate an engaging response about the "
        "video and offer help if needed."
    ),
}
GENERIC_ACKNOWLEDGMENT_PROMPT = (
    "The user sent an attachment. Generate a short, friendly response "
    "acknowledging it and offering help."
)
ACKNOWLEDGMENT_FALLBACK = "👋 Thanks for sharing! How can I help you today?"

SENTIMENTS = {"positive", "negative", "neutral"}
INTENTS = {"question", "request", "greeting", "complaint", "other"}
UNPARSEABLE_ANALYSIS = MessageAnalysis(sentiment="neutral", intent="other", confidence=0.5)
FAILED_ANALYSIS = MessageAnalysis(sentiment="neutral", intent="other", confidence=0.0)


def contains_any(markers: Iterable[str]) -> ErrorPredicate:
    """Predicate matching error text that contains any of the markers."""
    markers = tuple(m for m in markers if m)

    def predicate(message: str) -> bool:
        return any(marker in message for marker in markers)

    return predicate


def build_error_rules(settings: Settings | None = None) -> list[ErrorRule]:
    """Ordered (predicate, kind) table. First match wins."""
    settings = settings or get_settings()
    return [
        (contains_any(settings.llm_credential_markers), FailureKind.INVALID_CREDENTIALS),
        (contains_any(settings.llm_quota_markers), FailureKind.QUOTA_EXCEEDED),
        (contains_any(settings.llm_safety_markers), FailureKind.SAFETY_BLOCKED),
    ]


def _response_text(response: BaseMessage) -> str:
    """Extract plain text from a chat model response."""
    content = response.content
    if isinstance(content, str):
        return content.strip()

    # Some providers return a list of content parts
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts).strip()


def _token_usage(response: BaseMessage) -> TokenUsage:
    usage = getattr(response, "usage_metadata", None) or {}
    return TokenUsage(
        prompt=usage.get("input_tokens") or 0,
        completion=usage.get("output_tokens") or 0,
        total=usage.get("total_tokens") or 0,
    )


def _parse_json_response(text: str) -> dict:
    """Parse the LLM's JSON response, handling markdown code blocks."""
    json_text = text

    if "```json" in json_text:
        json_text = json_text.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in json_text:
        json_text = json_text.split("```", 1)[1].split("```", 1)[0]

    data = json.loads(json_text.strip())
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object")
    return data


class AIGateway:
    """Typed wrapper around a LangChain chat model."""

    def __init__(
        self,
        llm: BaseChatModel,
        timeout_seconds: float | None = None,
        error_rules: Sequence[ErrorRule] | None = None,
    ):
        settings = get_settings()
        self.llm = llm
        self.timeout_seconds = (
            settings.llm_timeout_seconds if timeout_seconds is None else timeout_seconds
        )
        self.error_rules = list(error_rules) if error_rules is not None else build_error_rules(settings)

    async def _invoke(self, prompt: str) -> BaseMessage:
        return await asyncio.wait_for(
            self.llm.ainvoke([HumanMessage(content=prompt)]),
            timeout=self.timeout_seconds,
        )

    async def generate(self, request: GenerationRequest) -> GenerationOutcome:
        """Generate a conversational reply. Never raises."""
        prompt = render_prompt(request)

        try:
            response = await self._invoke(prompt)
        except asyncio.TimeoutError:
            logger.error(f"LLM call timed out after {self.timeout_seconds}s")
            return GenerationFailure(
                kind=FailureKind.UNKNOWN,
                message=f"LLM call timed out after {self.timeout_seconds}s",
                fallback_text=FALLBACK_TEXTS[FailureKind.UNKNOWN],
            )
        except Exception as e:
            logger.error(f"LLM API error: {type(e).__name__}: {e}")
            return self.classify_error(e)

        text = _response_text(response)
        if not text:
            logger.warning("LLM returned an empty response")
            return GenerationFailure(
                kind=FailureKind.UNKNOWN,
                message="LLM returned an empty response.",
                fallback_text=FALLBACK_TEXTS[FailureKind.UNKNOWN],
            )

        return GenerationSuccess(text=text, usage=_token_usage(response))

    def classify_error(self, error: BaseException) -> GenerationFailure:
        """Map a backend exception onto a failure kind with its fallback text."""
        message = str(error) or type(error).__name__

        for predicate, kind in self.error_rules:
            if predicate(message):
                return GenerationFailure(
                    kind=kind,
                    message=FAILURE_MESSAGES.get(kind, message),
                    fallback_text=FALLBACK_TEXTS[kind],
                )

        return GenerationFailure(
            kind=FailureKind.UNKNOWN,
            message=message,
            fallback_text=FALLBACK_TEXTS[FailureKind.UNKNOWN],
        )

    async def generate_acknowledgment(self, media_kind: str) -> str:
        """Short reply to a media message.

        Non-critical: any failure yields the fixed fallback text.
        """
        prompt = ACKNOWLEDGMENT_PROMPTS.get(media_kind, GENERIC_ACKNOWLEDGMENT_PROMPT)

        try:
            response = await self._invoke(prompt)
            text = _response_text(response)
        except Exception as e:
            logger.warning(f"Acknowledgment generation failed for {media_kind}: {e}")
            return ACKNOWLEDGMENT_FALLBACK

        return text or ACKNOWLEDGMENT_FALLBACK

    async def classify(self, text: str) -> MessageAnalysis:
        """Judge sentiment and intent of a message.

        Returns a neutral, low-confidence analysis when the model's answer
        can't be parsed, and zero confidence when the call itself fails.
        """
        prompt = load_prompt("classify.txt").format(message=text)

        try:
            response = await self._invoke(prompt)
        except Exception as e:
            logger.warning(f"Message analysis error: {e}")
            return FAILED_ANALYSIS

        try:
            data = _parse_json_response(_response_text(response))
            confidence = float(data.get("confidence", UNPARSEABLE_ANALYSIS.confidence))
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to parse message analysis: {e}")
            return UNPARSEABLE_ANALYSIS

        sentiment = str(data.get("sentiment", "")).lower()
        intent = str(data.get("intent", "")).lower()
        return MessageAnalysis(
            sentiment=sentiment if sentiment in SENTIMENTS else "neutral",
            intent=intent if intent in INTENTS else "other",
            confidence=min(max(confidence, 0.0), 1.0),
        )
