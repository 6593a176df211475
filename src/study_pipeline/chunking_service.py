"""Chunking service for overlapping word-window transcript segmentation."""

from collections.abc import Iterator, Sequence

from src.utils.logging import get_logger

from .config import StudyAssistantConfig
from .schemas import TextChunk, TranscriptSegment

logger = get_logger(__name__)


def _windows(word_count: int, size: int, overlap: int) -> Iterator[tuple[int, int]]:
    if size <= 0:
        raise ValueError("size must be positive")
    if overlap < 0 or overlap >= size:
        raise ValueError("overlap must be >= 0 and smaller than size")

    step = size - overlap
    start = 0
    while start < word_count:
        end = min(start + size, word_count)
        yield start, end
        if end == word_count:
            break
        start += step


def chunk_text(text: str, size: int = 50, overlap: int = 10) -> list[str]:
    """Split text into overlapping windows of words.

    Each chunk holds ``size`` words and consecutive chunks share ``overlap``
    words. The last chunk may be shorter.

    Args:
        text: Text to split on whitespace.
        size: Words per chunk.
        overlap: Words shared by consecutive chunks. Must be smaller than size.

    Returns:
        List of chunk strings, empty when text holds no words.

    Raises:
        ValueError: If overlap is not smaller than size.

    Examples:
        >>> chunk_text("a b c d e", size=3, overlap=1)
        ["a b c", "c d e"]
    """
    words = text.split()
    return [" ".join(words[start:end]) for start, end in _windows(len(words), size, overlap)]


class ChunkingService:
    """Service for chunking transcripts into timed word windows.

    Windows are built over the concatenated segment text. Each chunk's time
    range runs from the start of the segment holding its first word to the
    end of the segment holding its last word.
    """

    def __init__(self, config: StudyAssistantConfig):
        """Initialize chunking service with configuration.

        Args:
            config: Configuration object with chunk size and overlap.

        Raises:
            ValueError: If the configured overlap is not smaller than the size.
        """
        if config.chunk_overlap >= config.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")

        self.config = config
        logger.info(
            "chunking_service_initialized",
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
        )

    def chunk_segments(self, segments: Sequence[TranscriptSegment]) -> list[TextChunk]:
        """Chunk transcript segments with real timestamps.

        Args:
            segments: Transcript segments ordered by start time.

        Returns:
            List of TextChunk objects ready for embedding.
        """
        words: list[str] = []
        owners: list[int] = []  # Segment index of each word
        for seg_index, segment in enumerate(segments):
            seg_words = segment.text.split()
            words.extend(seg_words)
            owners.extend([seg_index] * len(seg_words))

        chunks = [
            TextChunk(
                index=i,
                text=" ".join(words[start:end]),
                start_time=segments[owners[start]].start,
                end_time=segments[owners[end - 1]].end,
            )
            for i, (start, end) in enumerate(
                _windows(len(words), self.config.chunk_size, self.config.chunk_overlap)
            )
        ]

        logger.info(
            "chunking_completed",
            segments=len(segments),
            words=len(words),
            chunks_created=len(chunks),
        )
        return chunks
