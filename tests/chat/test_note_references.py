"""Unit tests for @note reference expansion."""

import pytest

from src.chat.note_references import parse_note_references
from src.study_pipeline.schemas import Note


@pytest.fixture
def notes() -> list[Note]:
    return [
        Note(
            id="n1",
            video_id="dpw9EHDh2bM",
            timestamp="02:15",
            time_in_seconds=135,
            description="useState returns a pair",
        ),
        Note(
            id="n2",
            video_id="dpw9EHDh2bM",
            timestamp="09:29",
            time_in_seconds=569,
            description="effects run after render",
        ),
    ]


@pytest.mark.unit
class TestParseNoteReferences:
    """Test suite for parse_note_references."""

    def test_no_references(self, notes: list[Note]) -> None:
        refs = parse_note_references("What is useState?", notes)

        assert refs.display_text == "What is useState?"
        assert refs.prompt == "What is useState?"
        assert refs.referenced_notes == []

    def test_single_reference(self, notes: list[Note]) -> None:
        refs = parse_note_references("Explain @note1 again", notes)

        assert refs.display_text == "Explain note 1 (02:15) again"
        assert refs.prompt == (
            "Explain note 1 (02:15) again\n\n"
            "[Context from referenced notes:\n"
            "Note 1 (02:15): useState returns a pair\n"
            "]\n"
        )
        assert refs.referenced_notes == [notes[0]]

    def test_multiple_references_in_mention_order(self, notes: list[Note]) -> None:
        refs = parse_note_references("Compare @note2 with @note1 and @note2", notes)

        assert refs.display_text == "Compare note 2 (09:29) with note 1 (02:15) and note 2 (09:29)"
        assert [n.id for n in refs.referenced_notes] == ["n2", "n1"]
        assert "Note 2 (09:29): effects run after render\nNote 1 (02:15)" in refs.prompt

    @pytest.mark.parametrize("text", ["See @note3", "See @note0"])
    def test_out_of_range_reference_left_as_typed(self, notes: list[Note], text: str) -> None:
        refs = parse_note_references(text, notes)

        assert refs.display_text == text
        assert refs.prompt == text
        assert refs.referenced_notes == []

    def test_no_notes(self) -> None:
        refs = parse_note_references("Explain @note1", [])

        assert refs.display_text == "Explain @note1"
