"""Error taxonomy shared by the pipeline, the LLM providers and the API.

Each error carries the HTTP status and the ``error`` label the API boundary
uses when it turns the exception into a JSON response.
"""

from typing import Any


class StudyAssistantError(Exception):
    """Base class for all study assistant errors."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None):
        super().__init__(message or self.error)
        self.message = message or self.error
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON body returned to API clients."""
        payload: dict[str, Any] = {"error": self.error}
        details = self.details if self.details is not None else self.message
        if details and details != self.error:
            payload["details"] = details
        return payload


class ValidationError(StudyAssistantError):
    """A required request field is missing or malformed."""

    status_code = 400
    error = "Invalid request"


class TranscriptUnavailable(StudyAssistantError):
    """The transcript source could not produce subtitles for a video."""

    status_code = 404
    error = "Transcript unavailable"


class EmbeddingError(StudyAssistantError):
    """An embedding request was rejected or had nothing to embed."""

    status_code = 502
    error = "Embedding failed"


class VectorStoreError(StudyAssistantError):
    """The vector database rejected a request or could not be reached."""

    status_code = 502
    error = "Vector store error"


class AuthError(StudyAssistantError):
    """The provider API key is missing or invalid."""

    status_code = 401
    error = "Invalid or missing API key"


class RateLimited(StudyAssistantError):
    """The provider reported a rate limit or exhausted quota."""

    status_code = 429
    error = "Rate limit exceeded"


class PermissionDenied(StudyAssistantError):
    """The API key is valid but not allowed to use the requested resource."""

    status_code = 403
    error = "Permission denied"


class ProviderUnavailable(StudyAssistantError):
    """The provider could not be reached or reported a server-side failure."""

    status_code = 503
    error = "Provider unavailable"


class Unknown(StudyAssistantError):
    """A provider failure that matches no other category."""

    status_code = 500
    error = "Unknown provider error"
