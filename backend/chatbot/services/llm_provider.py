"""Multi-provider LLM service abstraction.

Supports: Google (Gemini), Groq, OpenAI
"""
import logging
from typing import Literal

from langchain_core.language_models import BaseChatModel

from chatbot.config import get_settings

logger = logging.getLogger(__name__)

LLMProvider = Literal["google", "groq", "openai"]


def is_ai_enabled() -> bool:
    """Check if an LLM API key is configured (not empty/placeholder)."""
    return get_settings().llm_configured


def get_llm(
    model: str | None = None,
    provider: LLMProvider | None = None,
    temperature: float | None = None,
) -> BaseChatModel:
    """Get an LLM instance for the configured provider.

    Args:
        model: Model name. If None, uses LLM_CHAT_MODEL from settings.
        provider: Provider name. If None, uses LLM_PROVIDER from settings.
        temperature: Sampling temperature. If None, uses LLM_TEMPERATURE.

    Returns:
        BaseChatModel instance for the provider.
    """
    settings = get_settings()
    provider = provider or settings.llm_provider
    model = model or settings.llm_chat_model
    temperature = settings.llm_temperature if temperature is None else temperature
    api_key = settings.llm_api_key

    if not settings.llm_configured:
        raise ValueError(
            f"LLM API key not configured. Set LLM_API_KEY in .env for provider '{provider}'."
        )

    logger.info(f"Creating LLM: provider={provider}, model={model}")

    if provider == "google":
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=model,
            google_api_key=api_key,
            temperature=temperature,
            top_p=settings.llm_top_p,
            top_k=settings.llm_top_k,
            max_output_tokens=settings.llm_max_output_tokens,
        )

    elif provider == "groq":
        from langchain_groq import ChatGroq

        return ChatGroq(
            model=model,
            api_key=api_key,
            temperature=temperature,
            max_tokens=settings.llm_max_output_tokens,
        )

    elif provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=model,
            api_key=api_key,
            temperature=temperature,
            top_p=settings.llm_top_p,
            max_tokens=settings.llm_max_output_tokens,
        )

    else:
        raise ValueError(
            f"Unknown LLM provider: '{provider}'. Supported: google, groq, openai."
        )


def get_chat_llm() -> BaseChatModel:
    """Get the LLM configured for conversational replies."""
    settings = get_settings()
    return get_llm(
        model=settings.llm_chat_model,
        provider=settings.llm_provider,
    )
