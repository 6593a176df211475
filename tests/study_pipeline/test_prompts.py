"""Unit tests for prompt building."""

import pytest

from src.study_pipeline.prompts import build_prompt, format_seconds, serialize_subtitles
from src.study_pipeline.schemas import RetrievedPassage, TranscriptSegment

SEPARATOR = "\n---------------\n"


@pytest.fixture
def subtitles() -> list[TranscriptSegment]:
    return [
        TranscriptSegment(text="Hello and welcome", start=0.0, duration=2.5),
        TranscriptSegment(text=" useState lets you add state ", start=135.0, duration=5.0),
        TranscriptSegment(text="effects run after render", start=569.16, duration=4.0),
    ]


@pytest.mark.unit
class TestFormatSeconds:
    """Test suite for format_seconds."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0.0, "0"),
            (135.0, "135"),
            (135, "135"),
            (569.16, "569.16"),
            (12.5, "12.5"),
            (3.999, "3.999"),
            (569.999, "569.999"),
            (3.9999, "3.999"),
            (59.9995, "59.999"),
        ],
    )
    def test_format(self, value: float, expected: str) -> None:
        assert format_seconds(value) == expected


@pytest.mark.unit
class TestBuildPrompt:
    """Test suite for build_prompt."""

    def test_serialize_subtitles(self, subtitles: list[TranscriptSegment]) -> None:
        assert serialize_subtitles(subtitles) == (
            "[0] Hello and welcome\n"
            "[135] useState lets you add state\n"
            "[569.16] effects run after render"
        )

    def test_prompt_sections_in_order(self, subtitles: list[TranscriptSegment]) -> None:
        """Test the prompt is the preamble followed by the labelled inputs."""
        prompt = build_prompt(
            subtitles,
            "dpw9EHDh2bM",
            language="English",
            user_question="What is useState?",
            user_context="I know class components",
        )

        assert prompt.endswith("\n")
        sections = prompt.rstrip("\n").split(SEPARATOR)
        assert sections[0].startswith("You are StudyTube AI")
        assert sections[1:] == [
            "videoId = dpw9EHDh2bM",
            "videoSubtitles =\n" + serialize_subtitles(subtitles),
            "context = I know class components",
            "question = What is useState?",
        ]

    def test_preamble_pins_citation_format(self, subtitles: list[TranscriptSegment]) -> None:
        """Test the preamble shows the exact citation form for this video."""
        prompt = build_prompt(subtitles, "dpw9EHDh2bM", user_question="q")

        assert "[<seconds>](?v=dpw9EHDh2bM&t=<seconds>)" in prompt
        assert "[135](?v=dpw9EHDh2bM&t=135)" in prompt
        assert "ONE citation per paragraph" in prompt
        assert "MM:SS" in prompt
        assert "{video_id}" not in prompt

    def test_language(self, subtitles: list[TranscriptSegment]) -> None:
        prompt = build_prompt(subtitles, "dpw9EHDh2bM", language="Spanish", user_question="q")

        assert "Write in Spanish" in prompt

    def test_missing_values_render_as_none(self, subtitles: list[TranscriptSegment]) -> None:
        prompt = build_prompt(subtitles, "dpw9EHDh2bM")

        assert "context = None" in prompt
        assert "question = None" in prompt
        assert "referenceTimestamp" not in prompt.split(SEPARATOR, 1)[1]

    def test_reference_moment(self, subtitles: list[TranscriptSegment]) -> None:
        """Test a reference timestamp adds both reference sections."""
        prompt = build_prompt(
            subtitles,
            "dpw9EHDh2bM",
            reference_timestamp=135.0,
            reference_description="the counter example",
            user_question="Explain this part",
        )

        assert f"{SEPARATOR}referenceTimestamp = 135{SEPARATOR}" in prompt
        assert f"{SEPARATOR}referenceDescription = the counter example{SEPARATOR}" in prompt

    def test_reference_timestamp_string(self, subtitles: list[TranscriptSegment]) -> None:
        prompt = build_prompt(subtitles, "dpw9EHDh2bM", reference_timestamp="2:15")

        assert "referenceTimestamp = 2:15" in prompt
        assert "referenceDescription = None" in prompt

    def test_relevant_passages(self, subtitles: list[TranscriptSegment]) -> None:
        passages = [
            RetrievedPassage(text="useState lets you add state", start_time=135.0, end_time=140.0, score=0.9)
        ]

        prompt = build_prompt(subtitles, "dpw9EHDh2bM", user_question="q", relevant_passages=passages)

        assert (
            f"{SEPARATOR}relevantPassages =\n- (135s - 140s) useState lets you add state{SEPARATOR}"
            in prompt
        )

    def test_deterministic(self, subtitles: list[TranscriptSegment]) -> None:
        args = (subtitles, "dpw9EHDh2bM", 135.0, "desc", "English", "q", "ctx")
        assert build_prompt(*args) == build_prompt(*args)
