"""LLM provider bindings with a uniform streaming interface."""

from collections.abc import AsyncIterator
from enum import Enum

from src.study_pipeline.config import StudyAssistantConfig, get_config
from src.study_pipeline.errors import ValidationError

from .base import LLMProvider
from .gemini_provider import GeminiProvider
from .openai_provider import GroqProvider, OpenAIProvider


class ProviderName(str, Enum):
    GEMINI = "gemini"
    OPENAI = "openai"
    GROQ = "groq"


def get_provider(
    name: str | ProviderName,
    api_key: str,
    config: StudyAssistantConfig | None = None,
) -> LLMProvider:
    """Create the provider binding for ``name`` using the caller's API key.

    Raises:
        ValidationError: If the provider name is not supported.
        AuthError: If the API key is empty.
    """
    config = config or get_config()

    try:
        provider = ProviderName(str(getattr(name, "value", name)).lower())
    except ValueError as e:
        supported = ", ".join(p.value for p in ProviderName)
        raise ValidationError(
            f"Unsupported provider '{name}'. Expected one of: {supported}"
        ) from e

    if provider is ProviderName.GEMINI:
        return GeminiProvider(api_key, config.gemini_model)
    if provider is ProviderName.OPENAI:
        return OpenAIProvider(api_key, config.openai_model)
    return GroqProvider(api_key, config.groq_model, base_url=config.groq_base_url)


def stream_completion(
    provider: str | ProviderName,
    api_key: str,
    prompt: str,
    config: StudyAssistantConfig | None = None,
) -> AsyncIterator[str]:
    """Stream a completion from the named provider."""
    return get_provider(provider, api_key, config).stream_completion(prompt)


__all__ = [
    "GeminiProvider",
    "GroqProvider",
    "LLMProvider",
    "OpenAIProvider",
    "ProviderName",
    "get_provider",
    "stream_completion",
]
