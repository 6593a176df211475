"""OpenAI and Groq streaming bindings (Groq via its OpenAI-compatible endpoint)."""

from collections.abc import AsyncIterator

import openai
from openai import AsyncOpenAI

from src.study_pipeline.errors import (
    AuthError,
    PermissionDenied,
    ProviderUnavailable,
    RateLimited,
    StudyAssistantError,
    Unknown,
)

from .base import LLMProvider, error_from_message, error_from_status

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class OpenAIProvider(LLMProvider):
    """Chat completions streamed from the OpenAI API."""

    name = "openai"

    def __init__(self, api_key: str, model: str, base_url: str | None = None):
        super().__init__(api_key, model)
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def _stream(self, prompt: str) -> AsyncIterator[str]:
        stream = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            stream=True,
        )
        try:
            async for chunk in stream:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        finally:
            await stream.close()

    def map_error(self, error: Exception) -> StudyAssistantError:
        message = str(error)

        if isinstance(error, openai.AuthenticationError):
            return AuthError(message)
        if isinstance(error, openai.RateLimitError):
            return RateLimited(message)
        if isinstance(error, openai.PermissionDeniedError):
            return PermissionDenied(message)
        if isinstance(error, (openai.APIConnectionError, openai.InternalServerError)):
            return ProviderUnavailable(message)
        if isinstance(error, openai.APIStatusError):
            error_cls = error_from_status(error.status_code) or error_from_message(message)
            return (error_cls or Unknown)(message)

        return (error_from_message(message) or Unknown)(message)


class GroqProvider(OpenAIProvider):
    """Chat completions streamed from Groq's OpenAI-compatible endpoint."""

    name = "groq"

    def __init__(self, api_key: str, model: str, base_url: str | None = None):
        super().__init__(api_key, model, base_url=base_url or GROQ_BASE_URL)
