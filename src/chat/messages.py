"""Chat message state for streamed assistant answers."""

import uuid
from collections.abc import AsyncIterable
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from src.study_pipeline.schemas import Note

# In-band marker the answer endpoint writes when a provider fails mid-stream
STREAM_ERROR_MARKER = "\n\n[stream-error] "

ERROR_NOTICE = "The answer could not be completed"


class ChatMessage(BaseModel):
    """One message of a chat session. Held in memory only."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "assistant"]
    content: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    referenced_notes: list[Note] = Field(default_factory=list)
    is_loading: bool = False
    error: str | None = None

    @classmethod
    def user(cls, content: str, referenced_notes: list[Note] | None = None) -> "ChatMessage":
        return cls(role="user", content=content, referenced_notes=referenced_notes or [])

    @classmethod
    def begin_assistant(cls) -> "ChatMessage":
        """Create an empty assistant message waiting for streamed text."""
        return cls(role="assistant", is_loading=True)

    def append(self, fragment: str) -> None:
        if not self.is_loading:
            raise RuntimeError("Cannot append to a finished message")
        self.content += fragment

    def complete(self) -> None:
        self.is_loading = False

    def fail(self, error: str) -> None:
        """Move the message to its terminal error state."""
        self.is_loading = False
        self.error = error
        notice = f"**{ERROR_NOTICE}:** {error}"
        self.content = f"{self.content.rstrip()}\n\n{notice}" if self.content else notice


async def consume_answer_stream(
    fragments: AsyncIterable[str], message: ChatMessage | None = None
) -> ChatMessage:
    """Drive an assistant message from a streamed answer to a terminal state.

    The message ends complete when the stream finishes cleanly, or failed
    when the stream raises or carries the server's error marker. A failed
    message is never retried.
    """
    message = message or ChatMessage.begin_assistant()

    try:
        async for fragment in fragments:
            message.append(fragment)
    except Exception as e:
        message.fail(str(e) or type(e).__name__)
        return message

    # The server writes the marker once, as the final paragraph of the body
    head, marker, error = message.content.rpartition(STREAM_ERROR_MARKER)
    if marker and "\n\n" not in error:
        message.content = head.rstrip()
        message.fail(error.strip() or ERROR_NOTICE)
    else:
        message.complete()
    return message
