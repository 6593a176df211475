"""Prompt builder for video question answering.

The preamble pins the citation micro-format ``[<seconds>](?v=<videoId>&t=<seconds>)``
that the timestamp link renderer recognizes. Changing its shape here breaks
seek links in every client.
"""

import math
from collections.abc import Sequence

from .schemas import RetrievedPassage, TranscriptSegment

# ==============================================================================
# System Prompt
# ==============================================================================

CHAT_PROMPT = """You are StudyTube AI, a helpful study assistant for YouTube educational videos.

You receive a video ID, the video's subtitles as lines of the form "[<seconds>] <text>",
optional passages retrieved as most relevant to the question, optional notes the user
took while watching, and the user's question.

## Your task
- Understand the main concepts discussed in the video from the subtitles.
- Interpret the user's question and relate it to the video content and the user's context.
- Answer precisely, citing the moments of the video where the answer is discussed.
- Do not reproduce the subtitles. Use only what is needed to answer.

## Response format
- Write in {language}, using markdown: short paragraphs, bullet points for lists,
  bold for key concepts.
- Cite a moment of the video with a markdown link in EXACTLY this form:

  [<seconds>](?v={video_id}&t=<seconds>)

  where <seconds> is the same number in both places, copied from the start value of a
  subtitle line, e.g. [135](?v={video_id}&t=135) or [569.16](?v={video_id}&t=569.16).
- Use at most ONE citation per paragraph, placed at the END of the paragraph.
- Only cite seconds values that appear in the subtitle data. Never invent timestamps.
- Never write timestamps as MM:SS or HH:MM:SS, and never use any other link target.

## Example
useState adds a piece of state to a function component and returns the current value
together with a setter. [135](?v={video_id}&t=135)
"""

NO_VALUE = "None"


def format_seconds(value: float) -> str:
    """Format a seconds value for subtitle lines and citations.

    Keeps millisecond precision and truncates anything finer, so a value is
    never rounded up into the next second.

    Examples:
        >>> format_seconds(135.0)
        "135"
        >>> format_seconds(569.16)
        "569.16"
        >>> format_seconds(569.9999)
        "569.999"
    """
    millis = math.floor(round(float(value) * 1000, 3))
    if millis % 1000 == 0:
        return str(millis // 1000)
    return f"{millis / 1000:.3f}".rstrip("0")


def serialize_subtitles(subtitles: Sequence[TranscriptSegment]) -> str:
    """Render subtitles as one "[<seconds>] <text>" line per segment."""
    return "\n".join(
        f"[{format_seconds(segment.start)}] {segment.text.strip()}" for segment in subtitles
    )


def _serialize_passages(passages: Sequence[RetrievedPassage]) -> str:
    return "\n".join(
        f"- ({format_seconds(p.start_time)}s - {format_seconds(p.end_time)}s) {p.text}"
        for p in passages
    )


def build_prompt(
    subtitles: Sequence[TranscriptSegment],
    video_id: str,
    reference_timestamp: str | float | None = None,
    reference_description: str | None = None,
    language: str = "English",
    user_question: str | None = None,
    user_context: str | None = None,
    relevant_passages: Sequence[RetrievedPassage] | None = None,
) -> str:
    """Build the instruction prompt for one question about a video.

    Args:
        subtitles: Transcript segments of the video.
        video_id: YouTube video ID, embedded in every citation target.
        reference_timestamp: Moment the user is asking about, if any.
        reference_description: The user's description of that moment.
        language: Language the answer should be written in.
        user_question: The user's question.
        user_context: Free-form context or notes supplied by the user.
        relevant_passages: Passages retrieved for the question.

    Returns:
        Prompt string ready to send to any provider.
    """
    sections = [
        CHAT_PROMPT.format(language=language, video_id=video_id).strip(),
        f"videoId = {video_id}",
        f"videoSubtitles =\n{serialize_subtitles(subtitles)}",
    ]

    if relevant_passages:
        sections.append(f"relevantPassages =\n{_serialize_passages(relevant_passages)}")

    if reference_timestamp is not None and reference_timestamp != "":
        reference = (
            format_seconds(reference_timestamp)
            if isinstance(reference_timestamp, (int, float))
            else reference_timestamp
        )
        sections.append(f"referenceTimestamp = {reference}")
        sections.append(f"referenceDescription = {reference_description or NO_VALUE}")

    sections.append(f"context = {user_context or NO_VALUE}")
    sections.append(f"question = {user_question or NO_VALUE}")

    return "\n---------------\n".join(sections) + "\n"
