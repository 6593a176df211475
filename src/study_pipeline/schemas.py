"""Pydantic schemas for the study assistant pipeline."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TranscriptSegment(BaseModel):
    """Single subtitle segment with timing in seconds.

    Segments are produced by the transcript source, ordered by ``start`` and
    never modified once fetched.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    start: float
    duration: float

    @property
    def end(self) -> float:
        return self.start + self.duration


class TextChunk(BaseModel):
    """Overlapping word window of a transcript with its time range.

    ``start_time`` and ``end_time`` come from the segments holding the first
    and last word of the window.
    """

    index: int
    text: str
    start_time: float
    end_time: float


class RecordType(str, Enum):
    TEXT_CHUNK = "text_chunk"
    TRANSCRIPT_SEGMENT = "transcript_segment"


class VectorRecord(BaseModel):
    """Vector stored in a video's namespace."""

    id: str
    values: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class VectorMatch(BaseModel):
    """Similarity search hit."""

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class NamespaceStatus(str, Enum):
    """Outcome of probing a namespace before indexing."""

    EXISTS = "exists"
    NOT_FOUND = "not_found"
    CHECK_FAILED = "check_failed"


class NamespaceStats(BaseModel):
    namespace: str
    vector_count: int = 0


class IndexResult(BaseModel):
    """Result of indexing one video into the vector store."""

    video_id: str
    status: Literal["indexed", "skipped"]
    chunks_indexed: int = 0
    chunks_failed: int = 0
    segments_indexed: int = 0


class RetrievedPassage(BaseModel):
    """Transcript passage returned by similarity search."""

    text: str
    start_time: float
    end_time: float
    score: float


class Note(BaseModel):
    """User-authored note captured at a moment of the video.

    Persisted in the Supabase ``notes`` table keyed by user and video.
    """

    id: str
    video_id: str
    timestamp: str  # Display form, e.g. "03:21"
    time_in_seconds: float
    description: str
    captured_at: datetime | None = None
    image_url: str | None = None
