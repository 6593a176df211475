"""Timestamp link post-processing for streamed answer markdown.

Answers cite video moments as ``[<seconds>](?v=<videoId>&t=<seconds>)``.
Links in exactly that shape become seek controls; every other link is
rendered as inert text so generated content can never navigate away.
All functions here accept partial markdown from a stream in progress.
"""

import html
import math
import re
from collections.abc import Callable
from dataclasses import dataclass

_LINK_RE = re.compile(r"\[([^\[\]\n]*)\]\(([^()\s]*)\)")
_TARGET_RE = re.compile(r"^\?v=([A-Za-z0-9_-]+)&t=(\d+(?:\.\d+)?)$")
_SECONDS_RE = re.compile(r"^\d+(?:\.\d+)?$")


@dataclass(frozen=True)
class TimestampLink:
    video_id: str
    seconds: int


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class SeekControl:
    label: str
    video_id: str
    seconds: int


@dataclass(frozen=True)
class InertLink:
    label: str
    target: str


Part = TextPart | SeekControl | InertLink


def parse_timestamp_link(label: str, target: str) -> TimestampLink | None:
    """Parse one markdown link against the citation micro-format.

    The target must be ``?v=<videoId>&t=<seconds>`` and the label must be the
    same seconds value. Fractional seconds are floored.

    Examples:
        >>> parse_timestamp_link("42", "?v=abc123&t=42")
        TimestampLink(video_id="abc123", seconds=42)
        >>> parse_timestamp_link("569.16", "?v=abc123&t=569.16")
        TimestampLink(video_id="abc123", seconds=569)
        >>> parse_timestamp_link("3:21", "?v=abc123&t=201") is None
        True
    """
    match = _TARGET_RE.match(target.strip())
    label = label.strip()
    if not match or not _SECONDS_RE.match(label):
        return None

    video_id, seconds = match.group(1), match.group(2)
    if float(label) != float(seconds):
        return None

    return TimestampLink(video_id=video_id, seconds=math.floor(float(seconds)))


def tokenize_markdown(text: str) -> list[Part]:
    """Split markdown into plain text, seek controls and inert links.

    Incomplete trailing link syntax stays in a TextPart.
    """
    parts: list[Part] = []
    position = 0

    for match in _LINK_RE.finditer(text):
        if match.start() > position:
            parts.append(TextPart(text[position : match.start()]))

        label, target = match.group(1), match.group(2)
        link = parse_timestamp_link(label, target)
        if link is not None:
            parts.append(SeekControl(label=label, video_id=link.video_id, seconds=link.seconds))
        else:
            parts.append(InertLink(label=label, target=target))
        position = match.end()

    if position < len(text):
        parts.append(TextPart(text[position:]))
    return parts


def find_timestamp_links(text: str) -> list[TimestampLink]:
    """Return every well-formed citation in ``text``, in order."""
    return [
        TimestampLink(video_id=part.video_id, seconds=part.seconds)
        for part in tokenize_markdown(text)
        if isinstance(part, SeekControl)
    ]


def render_html(text: str) -> str:
    """Render links in ``text`` as HTML, leaving the rest escaped.

    Citations become ``<button>`` elements carrying the video ID and seconds;
    other links become ``<span>`` elements with no target.
    """
    rendered = []
    for part in tokenize_markdown(text):
        if isinstance(part, SeekControl):
            rendered.append(
                '<button type="button" class="timestamp-link" '
                f'data-video-id="{html.escape(part.video_id)}" '
                f'data-seconds="{part.seconds}">{html.escape(part.label)}</button>'
            )
        elif isinstance(part, InertLink):
            rendered.append(f'<span class="inert-link">{html.escape(part.label)}</span>')
        else:
            rendered.append(html.escape(part.text))
    return "".join(rendered)


class TimestampLinkRenderer:
    """Binds seek controls to the player's ``seek(video_id, seconds)`` callback."""

    def __init__(self, seek: Callable[[str, int], None]):
        self.seek = seek

    def render(self, text: str) -> list[Part]:
        return tokenize_markdown(text)

    def activate(self, part: Part) -> bool:
        """Handle a click on a rendered part.

        Returns:
            True if the part was a seek control and the player was seeked.
        """
        if isinstance(part, SeekControl):
            self.seek(part.video_id, part.seconds)
            return True
        return False
