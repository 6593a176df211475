"""Embedding service for query and document vectors."""

import asyncio
from enum import Enum

from google import genai
from google.genai import types
from openai import AsyncOpenAI

from src.utils.logging import get_logger

from .config import StudyAssistantConfig
from .errors import EmbeddingError

logger = get_logger(__name__)


class EmbedMode(str, Enum):
    """Embedding intent: user questions use QUERY, indexed content DOC."""

    QUERY = "QUERY"
    DOC = "DOC"


_GEMINI_TASK_TYPES = {
    EmbedMode.QUERY: "RETRIEVAL_QUERY",
    EmbedMode.DOC: "RETRIEVAL_DOCUMENT",
}


class EmbeddingService:
    """Service for generating text embeddings.

    Gemini embeddings honour the QUERY/DOC mode through the retrieval task
    type. OpenAI-compatible providers are also supported, in which case the
    mode has no effect on the request.
    """

    def __init__(self, config: StudyAssistantConfig):
        """Initialize embedding service with configuration.

        Args:
            config: Configuration object with embedding provider settings.
        """
        self.config = config
        self.provider = config.embedding_provider.lower()
        self.client = self._get_client()
        logger.info(
            "embedding_service_initialized",
            provider=self.provider,
            model=config.embedding_model,
        )

    def _get_client(self) -> genai.Client | AsyncOpenAI:
        if self.provider == "gemini":
            return genai.Client(api_key=self.config.embedding_api_key)
        return AsyncOpenAI(
            base_url=self.config.embedding_base_url,
            api_key=self.config.embedding_api_key,
        )

    async def embed(self, text: str, mode: EmbedMode = EmbedMode.DOC) -> list[float]:
        """Generate an embedding for a single text.

        Args:
            text: Text content to embed.
            mode: QUERY for user questions, DOC for indexed content.

        Returns:
            Embedding vector as a list of floats.

        Raises:
            EmbeddingError: If text is empty or the provider rejects the request.
        """
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        try:
            if self.provider == "gemini":
                result = await self.client.aio.models.embed_content(
                    model=self.config.embedding_model,
                    contents=text,
                    config=types.EmbedContentConfig(task_type=_GEMINI_TASK_TYPES[mode]),
                )
                embedding = list(result.embeddings[0].values)
            else:
                response = await self.client.embeddings.create(
                    input=text,
                    model=self.config.embedding_model,
                )
                embedding = response.data[0].embedding

        except Exception as e:
            logger.exception(
                "embedding_failed",
                text_length=len(text),
                mode=mode.value,
                error_type=type(e).__name__,
            )
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        logger.debug(
            "embedding_generated",
            text_length=len(text),
            mode=mode.value,
            embedding_dim=len(embedding),
        )
        return embedding

    async def embed_batch(
        self,
        texts: list[str],
        mode: EmbedMode = EmbedMode.DOC,
        batch_size: int | None = None,
    ) -> list[list[float] | None]:
        """Embed many texts, skipping the ones that fail.

        Texts are embedded one request each, issued concurrently in groups of
        ``batch_size``. A failed text is logged and left as None so the caller
        can index the rest.

        Args:
            texts: Texts to embed.
            mode: Embedding intent for every text.
            batch_size: Concurrent requests per group (default: config.batch_size).

        Returns:
            Embeddings aligned with ``texts``; None where embedding failed.
        """
        batch_size = batch_size or self.config.batch_size
        logger.info("batch_embedding_started", count=len(texts), batch_size=batch_size)

        embeddings: list[list[float] | None] = []

        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            results = await asyncio.gather(
                *[self.embed(text, mode) for text in batch],
                return_exceptions=True,
            )

            for offset, result in enumerate(results):
                if isinstance(result, BaseException):
                    logger.warning(
                        "batch_item_skipped",
                        item_index=i + offset,
                        error_type=type(result).__name__,
                    )
                    embeddings.append(None)
                else:
                    embeddings.append(result)

        failed = sum(1 for e in embeddings if e is None)
        logger.info(
            "batch_embedding_completed",
            total_embeddings=len(embeddings) - failed,
            failed=failed,
        )
        return embeddings
