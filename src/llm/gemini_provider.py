"""Gemini streaming binding built on the google-genai SDK."""

from collections.abc import AsyncIterator

from google import genai
from google.genai import errors as genai_errors

from src.study_pipeline.errors import AuthError, StudyAssistantError, Unknown

from .base import LLMProvider, error_from_message, error_from_status


class GeminiProvider(LLMProvider):
    """Content generation streamed from the Gemini API."""

    name = "gemini"

    def __init__(self, api_key: str, model: str):
        super().__init__(api_key, model)
        self.client = genai.Client(api_key=api_key)

    async def _stream(self, prompt: str) -> AsyncIterator[str]:
        stream = await self.client.aio.models.generate_content_stream(
            model=self.model,
            contents=prompt,
        )
        try:
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    def map_error(self, error: Exception) -> StudyAssistantError:
        message = str(error)

        if isinstance(error, genai_errors.APIError):
            # Gemini reports a bad key as 400 INVALID_ARGUMENT
            error_cls = error_from_message(message)
            if error_cls is not AuthError:
                error_cls = error_from_status(error.code) or error_cls
            return (error_cls or Unknown)(message)

        return (error_from_message(message) or Unknown)(message)
