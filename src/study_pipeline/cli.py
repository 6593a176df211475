"""Command-line interface for indexing videos and asking questions."""

import argparse
import asyncio
import os

from src.chat.messages import consume_answer_stream
from src.chat.timestamp_links import find_timestamp_links
from src.utils.logging import get_logger

from .config import get_config
from .errors import StudyAssistantError
from .pipeline import StudyPipeline
from .transcript_service import extract_video_id

logger = get_logger(__name__)


async def main() -> None:
    """CLI entry point for the study pipeline.

    Indexes a video into the vector store, or streams an answer to a
    question about it and lists the cited moments.
    """
    parser = argparse.ArgumentParser(
        description="StudyTube pipeline - index videos and ask questions about them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Index a video's transcript into Pinecone
  python -m src.study_pipeline.cli https://www.youtube.com/watch?v=dpw9EHDh2bM --index

  # Ask a question with Gemini (key from GEMINI_API_KEY)
  python -m src.study_pipeline.cli dpw9EHDh2bM --ask "What is useState?"

  # Ask with Groq
  python -m src.study_pipeline.cli dpw9EHDh2bM --ask "What is useEffect?" --provider groq
        """,
    )

    parser.add_argument("video", help="YouTube video URL or ID")
    parser.add_argument("--index", action="store_true", help="Index the video transcript")
    parser.add_argument("--ask", type=str, help="Question to ask about the video")
    parser.add_argument(
        "--provider",
        type=str,
        choices=["gemini", "openai", "groq"],
        help="LLM provider for --ask (default: DEFAULT_LLM_PROVIDER)",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        help="Provider API key (default: <PROVIDER>_API_KEY environment variable)",
    )

    args = parser.parse_args()

    video_id = extract_video_id(args.video)
    if not video_id:
        print(f"\n❌ Not a YouTube video URL or ID: {args.video}")
        return

    config = get_config()
    provider = args.provider or config.default_provider

    logger.info("cli_started", video_id=video_id, index=args.index, ask=bool(args.ask))

    pipeline = StudyPipeline(config)

    try:
        if args.index:
            result = await pipeline.index_video(video_id)
            print("\n" + "=" * 60)
            print("Indexing Results")
            print("=" * 60)
            print(f"Video: {video_id}")
            print(f"Status: {result.status}")
            print(f"Chunks indexed: {result.chunks_indexed}")
            print(f"Chunks failed: {result.chunks_failed}")
            print(f"Segments indexed: {result.segments_indexed}")
            print("=" * 60 + "\n")

        if args.ask:
            api_key = args.api_key or os.getenv(f"{provider.upper()}_API_KEY", "")
            stream = await pipeline.answer_stream(
                video_id, args.ask, api_key, provider=provider
            )
            message = await consume_answer_stream(stream)
            print("\n" + message.content + "\n")

            links = find_timestamp_links(message.content)
            if links:
                print("Cited moments:")
                for link in links:
                    print(f"  ▶ https://youtube.com/watch?v={link.video_id}&t={link.seconds}s")
            if message.error:
                print(f"\n❌ Answer failed: {message.error}")

    except StudyAssistantError as e:
        logger.exception("cli_failed", error=e.error)
        print(f"\n❌ {e.error}: {e.message}")


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
