"""Provider interface and error mapping shared by all LLM bindings."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from src.study_pipeline.errors import (
    AuthError,
    PermissionDenied,
    ProviderUnavailable,
    RateLimited,
    StudyAssistantError,
    Unknown,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Checked in order; the first matching phrase decides the category
_ERROR_PHRASES: list[tuple[type[StudyAssistantError], tuple[str, ...]]] = [
    (
        AuthError,
        (
            "invalid api key",
            "api key not valid",
            "incorrect api key",
            "invalid_api_key",
            "api_key_invalid",
            "unauthorized",
            "unauthenticated",
        ),
    ),
    (
        RateLimited,
        ("rate limit", "rate_limit", "quota", "resource_exhausted", "too many requests"),
    ),
    (PermissionDenied, ("permission", "forbidden")),
    (
        ProviderUnavailable,
        ("unavailable", "overloaded", "timed out", "timeout", "connection", "bad gateway"),
    ),
]

_STATUS_ERRORS: dict[int, type[StudyAssistantError]] = {
    401: AuthError,
    403: PermissionDenied,
    429: RateLimited,
}


def error_from_message(message: str) -> type[StudyAssistantError] | None:
    """Classify a provider error message by well-known phrases.

    Examples:
        >>> error_from_message("Incorrect API key provided")
        AuthError
        >>> error_from_message("You exceeded your current quota")
        RateLimited
    """
    lowered = message.lower()
    for error_cls, phrases in _ERROR_PHRASES:
        if any(phrase in lowered for phrase in phrases):
            return error_cls
    return None


def error_from_status(status_code: int | None) -> type[StudyAssistantError] | None:
    """Classify a provider error by HTTP status code."""
    if status_code is None:
        return None
    if status_code in _STATUS_ERRORS:
        return _STATUS_ERRORS[status_code]
    if status_code >= 500:
        return ProviderUnavailable
    return None


class LLMProvider(ABC):
    """Streaming completion backend bound to one API key and model.

    Subclasses translate provider-specific exceptions into the shared error
    taxonomy in ``map_error``; ``stream_completion`` applies it to every
    failure, including ones raised after streaming has begun.
    """

    name: str = ""

    def __init__(self, api_key: str, model: str):
        if not api_key or not api_key.strip():
            raise AuthError(f"An API key is required for provider '{self.name}'")
        self.api_key = api_key
        self.model = model

    @abstractmethod
    def _stream(self, prompt: str) -> AsyncIterator[str]:
        """Yield raw text fragments from the provider."""

    def map_error(self, error: Exception) -> StudyAssistantError:
        """Map a provider exception onto the shared error taxonomy."""
        error_cls = error_from_message(str(error)) or Unknown
        return error_cls(str(error))

    async def stream_completion(self, prompt: str) -> AsyncIterator[str]:
        """Stream the completion for ``prompt`` as incremental text fragments.

        The iterator is single pass. Stopping early closes the provider
        stream.

        Raises:
            StudyAssistantError: A taxonomy error for any provider failure.
        """
        logger.info("completion_stream_started", provider=self.name, model=self.model)
        fragments = 0
        stream = self._stream(prompt)

        try:
            async for fragment in stream:
                if fragment:
                    fragments += 1
                    yield fragment
        except StudyAssistantError:
            raise
        except Exception as e:
            mapped = self.map_error(e)
            logger.warning(
                "completion_stream_failed",
                provider=self.name,
                error=mapped.error,
                error_type=type(e).__name__,
                fragments=fragments,
            )
            raise mapped from e
        finally:
            # Runs on early abandonment too, releasing the provider connection
            await stream.aclose()

        logger.info("completion_stream_completed", provider=self.name, fragments=fragments)
