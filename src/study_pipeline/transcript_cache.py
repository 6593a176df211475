"""In-memory TTL cache for fetched transcripts."""

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Protocol

from .schemas import TranscriptSegment


class TranscriptCache(Protocol):
    """Cache interface used by the transcript service."""

    def get(self, video_id: str) -> list[TranscriptSegment] | None: ...

    def set(self, video_id: str, segments: list[TranscriptSegment]) -> None: ...

    def has(self, video_id: str) -> bool: ...


class InMemoryTTLCache:
    """Transcript cache with lazy TTL expiry and an optional LRU bound.

    Entries are checked for expiry when read; nothing runs in the background.
    With ``max_entries`` of 0 the cache grows with every distinct video id
    for the lifetime of the process.
    """

    def __init__(
        self,
        ttl_seconds: float = 600,
        max_entries: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[list[TranscriptSegment], float]] = (
            OrderedDict()
        )

    def get(self, video_id: str) -> list[TranscriptSegment] | None:
        entry = self._entries.get(video_id)
        if entry is None:
            return None

        segments, expiry = entry
        if expiry <= self._clock():
            return None

        self._entries.move_to_end(video_id)
        return segments

    def set(self, video_id: str, segments: list[TranscriptSegment]) -> None:
        self._entries[video_id] = (segments, self._clock() + self.ttl_seconds)
        self._entries.move_to_end(video_id)

        if self.max_entries and len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def has(self, video_id: str) -> bool:
        return self.get(video_id) is not None

    def __len__(self) -> int:
        return len(self._entries)
