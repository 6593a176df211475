"""Unit tests for chat message state."""

from collections.abc import AsyncIterator

import pytest

from src.chat.messages import (
    ERROR_NOTICE,
    STREAM_ERROR_MARKER,
    ChatMessage,
    consume_answer_stream,
)
from src.study_pipeline.errors import RateLimited


async def fragments(*items: str, error: Exception | None = None) -> AsyncIterator[str]:
    for item in items:
        yield item
    if error is not None:
        raise error


@pytest.mark.unit
class TestChatMessage:
    """Test suite for ChatMessage."""

    def test_user_message(self) -> None:
        message = ChatMessage.user("What is useState?")

        assert message.role == "user"
        assert message.is_loading is False
        assert message.referenced_notes == []
        assert message.id

    def test_assistant_message_starts_loading(self) -> None:
        message = ChatMessage.begin_assistant()

        assert message.role == "assistant"
        assert message.is_loading is True
        assert message.content == ""

    def test_finished_message_rejects_fragments(self) -> None:
        message = ChatMessage.begin_assistant()
        message.append("done")
        message.complete()

        with pytest.raises(RuntimeError):
            message.append("more")

    def test_fail_keeps_partial_content(self) -> None:
        message = ChatMessage.begin_assistant()
        message.append("Partial answer ")

        message.fail("Rate limit exceeded")

        assert message.is_loading is False
        assert message.error == "Rate limit exceeded"
        assert message.content == f"Partial answer\n\n**{ERROR_NOTICE}:** Rate limit exceeded"


@pytest.mark.unit
class TestConsumeAnswerStream:
    """Test suite for consume_answer_stream."""

    @pytest.mark.asyncio
    async def test_clean_stream_completes(self) -> None:
        message = await consume_answer_stream(fragments("use", "State"))

        assert message.content == "useState"
        assert message.is_loading is False
        assert message.error is None

    @pytest.mark.asyncio
    async def test_raised_error_reaches_terminal_state(self) -> None:
        """Test a mid-stream exception leaves the message failed, not loading."""
        message = await consume_answer_stream(
            fragments("Partial", error=RateLimited("quota exhausted"))
        )

        assert message.is_loading is False
        assert message.error == "quota exhausted"
        assert message.content.startswith("Partial")

    @pytest.mark.asyncio
    async def test_error_marker_reaches_terminal_state(self) -> None:
        """Test the server's in-band error marker fails the message."""
        message = await consume_answer_stream(
            fragments("Partial answer", STREAM_ERROR_MARKER, "Rate limit exceeded: quota")
        )

        assert message.is_loading is False
        assert message.error == "Rate limit exceeded: quota"
        assert "[stream-error]" not in message.content
        assert message.content.startswith("Partial answer\n\n")

    @pytest.mark.asyncio
    async def test_marker_split_across_fragments(self) -> None:
        marker = STREAM_ERROR_MARKER.strip()
        message = await consume_answer_stream(
            fragments("Partial", "\n\n", marker[:5], marker[5:], " Provider unavailable")
        )

        assert message.error == "Provider unavailable"

    @pytest.mark.asyncio
    async def test_inline_marker_text_completes(self) -> None:
        """Test an answer that merely mentions the marker label still completes."""
        content = "Clients look for a [stream-error] line at the end of the body."
        message = await consume_answer_stream(fragments(content))

        assert message.is_loading is False
        assert message.error is None
        assert message.content == content

    @pytest.mark.asyncio
    async def test_marker_followed_by_more_answer_completes(self) -> None:
        """Test a marker that is not the final paragraph is treated as answer text."""
        content = f"Intro{STREAM_ERROR_MARKER}example label\n\nThe answer goes on."
        message = await consume_answer_stream(fragments(content))

        assert message.error is None
        assert message.content == content

    @pytest.mark.asyncio
    async def test_uses_given_message(self) -> None:
        message = ChatMessage.begin_assistant()

        result = await consume_answer_stream(fragments("ok"), message)

        assert result is message
        assert message.content == "ok"
