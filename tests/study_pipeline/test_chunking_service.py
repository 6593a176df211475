"""Unit tests for chunking service."""

import pytest

from src.study_pipeline.chunking_service import ChunkingService, chunk_text
from src.study_pipeline.config import StudyAssistantConfig
from src.study_pipeline.schemas import TranscriptSegment


def words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(n))


@pytest.mark.unit
class TestChunkText:
    """Test suite for the chunk_text function."""

    def test_empty_text(self) -> None:
        assert chunk_text("") == []
        assert chunk_text("   \n ") == []

    def test_short_text_single_chunk(self) -> None:
        assert chunk_text("one two three") == ["one two three"]

    def test_exact_size_single_chunk(self) -> None:
        """Test text of exactly one window produces no redundant tail chunk."""
        assert chunk_text(words(50)) == [words(50)]

    def test_windows_advance_by_size_minus_overlap(self) -> None:
        assert chunk_text("a b c d e", size=3, overlap=1) == ["a b c", "c d e"]
        assert chunk_text("a b c d e f", size=3, overlap=1) == ["a b c", "c d e", "e f"]

    def test_default_size_and_overlap(self) -> None:
        chunks = chunk_text(words(100))

        assert [len(c.split()) for c in chunks] == [50, 50, 20]
        assert chunks[1].split()[0] == "w40"
        assert chunks[2].split()[0] == "w80"

    def test_splits_on_any_whitespace(self) -> None:
        assert chunk_text("a\tb\n\nc  d", size=2, overlap=0) == ["a b", "c d"]

    @pytest.mark.parametrize(
        ("n_words", "size", "overlap"),
        [(1, 50, 10), (49, 50, 10), (51, 50, 10), (137, 50, 10), (100, 7, 3), (20, 5, 0), (30, 2, 1)],
    )
    def test_coverage_and_overlap(self, n_words: int, size: int, overlap: int) -> None:
        """Test every word is covered and adjacent chunks share exactly ``overlap`` words."""
        text = words(n_words)
        chunks = [c.split() for c in chunk_text(text, size=size, overlap=overlap)]

        covered = {w for chunk in chunks for w in chunk}
        assert covered == set(text.split())
        assert all(len(chunk) <= size for chunk in chunks)
        assert all(len(chunk) == size for chunk in chunks[:-1])

        for prev, nxt in zip(chunks, chunks[1:]):
            assert prev[size - overlap :] == nxt[:overlap]

    @pytest.mark.parametrize(("size", "overlap"), [(10, 10), (10, 12), (0, 0), (5, -1)])
    def test_invalid_overlap_rejected(self, size: int, overlap: int) -> None:
        with pytest.raises(ValueError):
            chunk_text(words(20), size=size, overlap=overlap)

    def test_deterministic(self) -> None:
        text = words(123)
        assert chunk_text(text, 17, 4) == chunk_text(text, 17, 4)


@pytest.mark.unit
class TestChunkingService:
    """Test suite for ChunkingService class."""

    @pytest.fixture
    def config(self) -> StudyAssistantConfig:
        """Create test configuration with small windows."""
        return StudyAssistantConfig(chunk_size=4, chunk_overlap=1)

    @pytest.fixture
    def segments(self) -> list[TranscriptSegment]:
        return [
            TranscriptSegment(text="hooks were introduced", start=0.0, duration=3.0),
            TranscriptSegment(text="in react sixteen", start=3.0, duration=2.5),
            TranscriptSegment(text="useState lets you add state", start=135.0, duration=5.0),
        ]

    def test_invalid_config_rejected(self) -> None:
        with pytest.raises(ValueError):
            ChunkingService(StudyAssistantConfig(chunk_size=10, chunk_overlap=10))

    def test_chunk_text_matches_chunk_text_function(
        self, config: StudyAssistantConfig, segments: list[TranscriptSegment]
    ) -> None:
        """Test timed chunks hold the same windows as chunk_text."""
        service = ChunkingService(config)
        chunks = service.chunk_segments(segments)
        full_text = " ".join(s.text for s in segments)

        assert [c.text for c in chunks] == chunk_text(full_text, size=4, overlap=1)
        assert [c.index for c in chunks] == list(range(len(chunks)))

    def test_chunk_times_follow_segments(
        self, config: StudyAssistantConfig, segments: list[TranscriptSegment]
    ) -> None:
        """Test chunk time ranges come from the segments holding their words."""
        chunks = ChunkingService(config).chunk_segments(segments)

        # Words: hooks were introduced in | in react sixteen useState | useState lets you add | add state
        assert chunks[0].text == "hooks were introduced in"
        assert (chunks[0].start_time, chunks[0].end_time) == (0.0, 5.5)
        assert chunks[1].text == "in react sixteen useState"
        assert (chunks[1].start_time, chunks[1].end_time) == (3.0, 140.0)
        assert chunks[2].text == "useState lets you add"
        assert (chunks[2].start_time, chunks[2].end_time) == (135.0, 140.0)
        assert chunks[3].text == "add state"
        assert (chunks[3].start_time, chunks[3].end_time) == (135.0, 140.0)

    def test_no_segments(self, config: StudyAssistantConfig) -> None:
        assert ChunkingService(config).chunk_segments([]) == []

    def test_segments_without_words_are_skipped(self, config: StudyAssistantConfig) -> None:
        segments = [
            TranscriptSegment(text="  ", start=0.0, duration=1.0),
            TranscriptSegment(text="[Music]", start=1.0, duration=2.0),
        ]

        chunks = ChunkingService(config).chunk_segments(segments)

        assert len(chunks) == 1
        assert (chunks[0].start_time, chunks[0].end_time) == (1.0, 3.0)
