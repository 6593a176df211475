"""Transcript service for fetching YouTube subtitles via the Supadata API."""

import re

from supadata import Supadata

from src.utils.logging import get_logger

from .config import StudyAssistantConfig
from .errors import TranscriptUnavailable, ValidationError
from .schemas import TranscriptSegment
from .transcript_cache import InMemoryTTLCache, TranscriptCache

logger = get_logger(__name__)

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_VIDEO_URL_RE = re.compile(
    r"(?:youtu\.be/|/v/|/u/\w/|/embed/|/shorts/|watch\?v=|&v=)([A-Za-z0-9_-]{11})"
)

# Error text the transcript source uses when a video has no usable captions
_UNAVAILABLE_MARKERS = (
    "transcript-unavailable",
    "206",
    "disabled",
    "not available",
    "no transcript",
    "age-restricted",
)


def extract_video_id(value: str) -> str | None:
    """Extract the 11-character video ID from a YouTube URL or bare ID.

    Args:
        value: Watch, short, embed or youtu.be URL, or the ID itself.

    Returns:
        The video ID, or None if the value holds no recognizable ID.

    Examples:
        >>> extract_video_id("https://www.youtube.com/watch?v=dpw9EHDh2bM")
        "dpw9EHDh2bM"
        >>> extract_video_id("https://youtu.be/dpw9EHDh2bM?t=30")
        "dpw9EHDh2bM"
    """
    value = (value or "").strip()
    if _VIDEO_ID_RE.match(value):
        return value

    match = _VIDEO_URL_RE.search(value)
    return match.group(1) if match else None


class TranscriptService:
    """Service for fetching transcripts with an in-process TTL cache.

    A cache hit returns the cached segment list itself, so callers must not
    mutate it. Misses and expired entries trigger a fresh fetch whose result
    overwrites the cache entry; fetch errors propagate without retry.
    """

    def __init__(
        self,
        config: StudyAssistantConfig,
        cache: TranscriptCache | None = None,
    ):
        """Initialize transcript service with configuration.

        Args:
            config: Configuration object with Supadata API key and cache TTL.
            cache: Cache implementation. Defaults to an in-memory TTL cache.
        """
        self.config = config
        self.client = Supadata(api_key=config.supadata_api_key)
        if cache is None:
            cache = InMemoryTTLCache(
                ttl_seconds=config.transcript_cache_ttl_seconds,
                max_entries=config.transcript_cache_max_entries,
            )
        self.cache: TranscriptCache = cache
        logger.info(
            "transcript_service_initialized",
            api_key_present=bool(config.supadata_api_key),
            cache_ttl_seconds=config.transcript_cache_ttl_seconds,
        )

    async def get_transcript(self, video_id: str) -> list[TranscriptSegment]:
        """Get transcript segments for a video, served from cache when fresh.

        Args:
            video_id: YouTube video ID.

        Returns:
            Segments ordered by start time.

        Raises:
            ValidationError: If video_id is blank.
            TranscriptUnavailable: If the source cannot produce subtitles.
        """
        if not video_id or not video_id.strip():
            raise ValidationError("Video ID is required")

        cached = self.cache.get(video_id)
        if cached is not None:
            logger.info("transcript_cache_hit", video_id=video_id)
            return cached

        segments = await self.fetch_transcript(video_id)
        self.cache.set(video_id, segments)
        logger.info("transcript_cache_miss", video_id=video_id, segments=len(segments))
        return segments

    async def fetch_transcript(self, video_id: str) -> list[TranscriptSegment]:
        """Fetch transcript segments from Supadata, bypassing the cache.

        Args:
            video_id: YouTube video ID.

        Returns:
            Segments with start and duration converted to seconds.

        Raises:
            TranscriptUnavailable: If the source fails or returns no segments.
        """
        logger.info("fetching_transcript", video_id=video_id)

        try:
            response = self.client.youtube.transcript(
                video_id=video_id,
                text=False,  # Get segments with timestamps instead of plain text
            )
        except Exception as e:
            error_str = str(e).lower()
            if any(marker in error_str for marker in _UNAVAILABLE_MARKERS):
                logger.warning("transcript_unavailable", video_id=video_id)
            else:
                logger.exception(
                    "transcript_fetch_error",
                    video_id=video_id,
                    error_type=type(e).__name__,
                )
            raise TranscriptUnavailable(
                f"No transcript available for video {video_id}"
            ) from e

        segments = sorted(
            (
                TranscriptSegment(
                    text=seg.text,
                    start=float(seg.offset) / 1000,
                    duration=float(seg.duration) / 1000,
                )
                for seg in (response.content or [])
            ),
            key=lambda s: s.start,
        )

        if not segments:
            logger.warning("transcript_empty", video_id=video_id)
            raise TranscriptUnavailable(f"No transcript available for video {video_id}")

        logger.info(
            "transcript_fetched",
            video_id=video_id,
            segments=len(segments),
            lang=getattr(response, "lang", None),
        )
        return segments
