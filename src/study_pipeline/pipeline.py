"""Main pipeline orchestrator for indexing videos and answering questions."""

from collections.abc import AsyncIterator

from src.llm import get_provider
from src.utils.logging import get_logger

from .chunking_service import ChunkingService
from .config import StudyAssistantConfig, get_config
from .embedding_service import EmbeddingService, EmbedMode
from .errors import StudyAssistantError, ValidationError, VectorStoreError
from .prompts import build_prompt
from .schemas import (
    IndexResult,
    NamespaceStatus,
    RecordType,
    RetrievedPassage,
    TextChunk,
    TranscriptSegment,
    VectorRecord,
)
from .transcript_service import TranscriptService
from .vector_store_service import VectorStoreService

logger = get_logger(__name__)


class StudyPipeline:
    """Orchestrates transcript retrieval, indexing and answer streaming.

    Indexing and retrieval need a configured vector store. Without one the
    pipeline answers from the full transcript alone.
    """

    def __init__(
        self,
        config: StudyAssistantConfig | None = None,
        transcript_service: TranscriptService | None = None,
    ):
        """Initialize pipeline with all required services.

        Args:
            config: Configuration object. If None, loads from environment.
            transcript_service: Shared transcript service (and its cache).
        """
        self.config = config or get_config()
        self.transcript_service = transcript_service or TranscriptService(self.config)
        self.chunking_service = ChunkingService(self.config)

        self.embedding_service: EmbeddingService | None = None
        self.vector_store_service: VectorStoreService | None = None
        if self.config.vector_store_enabled:
            self.embedding_service = EmbeddingService(self.config)
            self.vector_store_service = VectorStoreService(self.config)

        logger.info(
            "pipeline_initialized",
            vector_store_enabled=self.vector_store_service is not None,
            index_segments=self.config.index_segments,
        )

    def _require_vector_store(self) -> tuple[EmbeddingService, VectorStoreService]:
        if self.embedding_service is None or self.vector_store_service is None:
            raise VectorStoreError("Vector store is not configured")
        return self.embedding_service, self.vector_store_service

    async def index_video(self, video_id: str) -> IndexResult:
        """Chunk, embed and store a video's transcript in its namespace.

        This method:
        1. Checks the namespace and skips videos that are already stored
        2. Fetches the transcript (served from cache when fresh)
        3. Chunks it into timed word windows
        4. Embeds every chunk, skipping the ones that fail
        5. Upserts the embedded chunks (and optionally every segment)

        Args:
            video_id: YouTube video ID, also used as the namespace.

        Returns:
            IndexResult with the outcome and counts.

        Raises:
            VectorStoreError: If the store is not configured, the check
                failed, or the upsert failed.
            TranscriptUnavailable: If the video has no transcript.
        """
        embedding_service, vector_store = self._require_vector_store()
        logger.info("indexing_video", video_id=video_id)

        status = await vector_store.check_namespace(video_id)
        if status is NamespaceStatus.EXISTS:
            logger.info("video_already_indexed", video_id=video_id)
            return IndexResult(video_id=video_id, status="skipped")
        if status is NamespaceStatus.CHECK_FAILED:
            raise VectorStoreError(f"Could not check whether video {video_id} is indexed")

        segments = await self.transcript_service.get_transcript(video_id)
        chunks = self.chunking_service.chunk_segments(segments)

        embeddings = await embedding_service.embed_batch(
            [chunk.text for chunk in chunks], mode=EmbedMode.DOC
        )
        records = [
            self._chunk_record(video_id, chunk, embedding)
            for chunk, embedding in zip(chunks, embeddings, strict=True)
            if embedding is not None
        ]

        segments_indexed = 0
        if self.config.index_segments:
            segment_records = await self._segment_records(video_id, segments)
            segments_indexed = len(segment_records)
            records.extend(segment_records)

        await vector_store.upsert(video_id, records)

        result = IndexResult(
            video_id=video_id,
            status="indexed",
            chunks_indexed=len(records) - segments_indexed,
            chunks_failed=len(chunks) - (len(records) - segments_indexed),
            segments_indexed=segments_indexed,
        )
        logger.info(
            "video_indexed",
            video_id=video_id,
            chunks_indexed=result.chunks_indexed,
            chunks_failed=result.chunks_failed,
            segments_indexed=segments_indexed,
        )
        return result

    @staticmethod
    def _chunk_record(video_id: str, chunk: TextChunk, embedding: list[float]) -> VectorRecord:
        return VectorRecord(
            id=f"{video_id}_chunk_{chunk.index}",
            values=embedding,
            metadata={
                "text": chunk.text,
                "videoId": video_id,
                "startTime": chunk.start_time,
                "endTime": chunk.end_time,
                "type": RecordType.TEXT_CHUNK.value,
                "index": chunk.index,
            },
        )

    async def _segment_records(
        self, video_id: str, segments: list[TranscriptSegment]
    ) -> list[VectorRecord]:
        embedding_service, _ = self._require_vector_store()
        embeddings = await embedding_service.embed_batch(
            [segment.text for segment in segments], mode=EmbedMode.DOC
        )
        return [
            VectorRecord(
                id=f"{video_id}_segment_{i}",
                values=embedding,
                metadata={
                    "text": segment.text,
                    "videoId": video_id,
                    "startTime": segment.start,
                    "endTime": segment.end,
                    "type": RecordType.TRANSCRIPT_SEGMENT.value,
                    "index": i,
                },
            )
            for i, (segment, embedding) in enumerate(zip(segments, embeddings, strict=True))
            if embedding is not None
        ]

    async def retrieve_passages(
        self,
        video_id: str,
        question: str,
        top_k: int | None = None,
        record_type: RecordType = RecordType.TEXT_CHUNK,
    ) -> list[RetrievedPassage]:
        """Find the stored passages most relevant to a question.

        Args:
            video_id: Namespace to search.
            question: User question, embedded in QUERY mode.
            top_k: Number of passages (default: config.retrieval_top_k).
            record_type: Which record type to search.

        Returns:
            Passages ordered by descending similarity.
        """
        embedding_service, vector_store = self._require_vector_store()

        query_vector = await embedding_service.embed(question, mode=EmbedMode.QUERY)
        matches = await vector_store.query(
            video_id,
            query_vector,
            top_k=top_k or self.config.retrieval_top_k,
            filter={"type": {"$eq": record_type.value}},
        )
        return [
            RetrievedPassage(
                text=str(match.metadata.get("text", "")),
                start_time=float(match.metadata.get("startTime", 0.0)),
                end_time=float(match.metadata.get("endTime", 0.0)),
                score=match.score,
            )
            for match in matches
        ]

    async def _passages_for_answer(self, video_id: str, question: str) -> list[RetrievedPassage]:
        if self.vector_store_service is None:
            return []

        try:
            await self.index_video(video_id)
            passages = await self.retrieve_passages(video_id, question)
            if self.config.index_segments:
                passages.extend(
                    await self.retrieve_passages(
                        video_id, question, record_type=RecordType.TRANSCRIPT_SEGMENT
                    )
                )
            return passages

        except StudyAssistantError as e:
            # The full transcript is still in the prompt
            logger.warning(
                "retrieval_skipped",
                video_id=video_id,
                error=e.error,
                details=e.message,
            )
            return []

    async def answer_stream(
        self,
        video_id: str,
        question: str,
        api_key: str,
        provider: str | None = None,
        context: str | None = None,
        language: str = "English",
        reference_timestamp: str | float | None = None,
        reference_description: str | None = None,
    ) -> AsyncIterator[str]:
        """Prepare the streamed answer to a question about a video.

        Everything up to the provider call happens here, so request and
        transcript errors surface before any text is streamed.

        Returns:
            Async iterator of answer text fragments.

        Raises:
            ValidationError: If the question or video ID is missing, or the
                provider is unknown.
            AuthError: If the API key is missing.
            TranscriptUnavailable: If the video has no transcript.
        """
        if not video_id or not question or not question.strip():
            raise ValidationError("Both text and videoId are required")

        llm = get_provider(provider or self.config.default_provider, api_key, self.config)
        subtitles = await self.transcript_service.get_transcript(video_id)
        passages = await self._passages_for_answer(video_id, question)

        prompt = build_prompt(
            subtitles,
            video_id,
            reference_timestamp=reference_timestamp,
            reference_description=reference_description,
            language=language,
            user_question=question,
            user_context=context,
            relevant_passages=passages,
        )
        logger.info(
            "answer_prompt_built",
            video_id=video_id,
            provider=llm.name,
            prompt_length=len(prompt),
            passages=len(passages),
        )
        return llm.stream_completion(prompt)
