"""Expansion of ``@noteN`` references in chat input."""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from src.study_pipeline.schemas import Note

_NOTE_REF_RE = re.compile(r"@note(\d+)")


@dataclass
class NoteReferences:
    """Chat input with its note references resolved.

    Attributes:
        display_text: Input with each valid ``@noteN`` replaced by
            ``note N (<timestamp>)``, shown in the chat history.
        prompt: display_text plus a context block holding the referenced
            notes' descriptions, sent to the model.
        referenced_notes: Notes referenced by the input, in order of mention.
    """

    display_text: str
    prompt: str
    referenced_notes: list[Note] = field(default_factory=list)


def parse_note_references(text: str, notes: Sequence[Note]) -> NoteReferences:
    """Resolve ``@noteN`` references (1-based) against the user's notes.

    References outside the range of ``notes`` are left as typed.

    Examples:
        >>> refs = parse_note_references("Explain @note1", notes)
        >>> refs.display_text
        "Explain note 1 (03:21)"
    """
    referenced: list[Note] = []
    for match in _NOTE_REF_RE.finditer(text):
        index = int(match.group(1)) - 1
        if 0 <= index < len(notes) and notes[index] not in referenced:
            referenced.append(notes[index])

    def _replace(match: re.Match[str]) -> str:
        index = int(match.group(1)) - 1
        if 0 <= index < len(notes):
            return f"note {match.group(1)} ({notes[index].timestamp})"
        return match.group(0)

    display_text = _NOTE_REF_RE.sub(_replace, text)
    if not referenced:
        return NoteReferences(display_text=display_text, prompt=display_text)

    lines = ["", "", "[Context from referenced notes:"]
    for note in referenced:
        number = next(i for i, n in enumerate(notes) if n.id == note.id) + 1
        lines.append(f"Note {number} ({note.timestamp}): {note.description}")
    lines.append("]")

    return NoteReferences(
        display_text=display_text,
        prompt=display_text + "\n".join(lines) + "\n",
        referenced_notes=referenced,
    )
