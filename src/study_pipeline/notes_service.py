"""Notes service for user-authored video notes stored in Supabase."""

from datetime import UTC, datetime
from typing import Any

from supabase import Client, create_client

from src.utils.logging import get_logger

from .config import StudyAssistantConfig
from .schemas import Note

logger = get_logger(__name__)

NOTES_TABLE = "notes"


def _row_to_note(row: dict[str, Any]) -> Note:
    # Every column except id may come back NULL
    return Note(
        id=str(row["id"]),
        video_id=row.get("videoId") or "",
        timestamp=row.get("timestamp") or "",
        time_in_seconds=float(row.get("timestampSeconds") or 0),
        description=row.get("description") or "",
        captured_at=row.get("createdAt"),
        image_url=row.get("image"),
    )


class NotesService:
    """Service for reading and writing notes in the Supabase ``notes`` table.

    Notes are keyed by user identifier and video ID. Descriptions can be
    edited; nothing in this service deletes a note.
    """

    def __init__(self, config: StudyAssistantConfig):
        """Initialize notes service with configuration.

        Args:
            config: Configuration object with Supabase credentials.
        """
        self.config = config
        self.client: Client = create_client(config.supabase_url, config.supabase_key)
        logger.info("notes_service_initialized", supabase_url=config.supabase_url)

    async def get_notes(self, user_id: str, video_id: str) -> list[Note]:
        """Fetch a user's notes for a video in timestamp order.

        Args:
            user_id: User identifier.
            video_id: YouTube video ID.

        Returns:
            Notes ordered by time in the video. Empty if the query fails;
            rows that cannot be read as notes are logged and left out.
        """
        try:
            response = (
                self.client.table(NOTES_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .eq("videoId", video_id)
                .order("timestampSeconds", desc=False)
                .execute()
            )
        except Exception as e:
            logger.exception(
                "notes_fetch_failed",
                user_id=user_id,
                video_id=video_id,
                error_type=type(e).__name__,
            )
            return []

        notes = []
        for row in response.data or []:
            try:
                notes.append(_row_to_note(row))
            except (KeyError, TypeError, ValueError) as e:
                # pydantic's ValidationError is a ValueError
                logger.warning(
                    "note_row_skipped",
                    user_id=user_id,
                    video_id=video_id,
                    note_id=row.get("id") if isinstance(row, dict) else None,
                    error_type=type(e).__name__,
                )

        logger.debug("notes_fetched", user_id=user_id, video_id=video_id, count=len(notes))
        return notes

    async def create_note(
        self,
        user_id: str,
        video_id: str,
        timestamp: str,
        time_in_seconds: float,
        description: str,
        image_url: str | None = None,
    ) -> Note:
        """Create a note for a moment in the video.

        Raises:
            Exception: If the insert fails.
        """
        data = {
            "user_id": user_id,
            "videoId": video_id,
            "timestamp": timestamp,
            "timestampSeconds": time_in_seconds,
            "description": description,
            "image": image_url,
            "createdAt": datetime.now(UTC).isoformat(),
        }

        try:
            response = self.client.table(NOTES_TABLE).insert(data).execute()
            note = _row_to_note(response.data[0])
            logger.info("note_created", user_id=user_id, video_id=video_id, note_id=note.id)
            return note

        except Exception as e:
            logger.exception(
                "note_create_failed",
                user_id=user_id,
                video_id=video_id,
                error_type=type(e).__name__,
            )
            raise

    async def update_note_description(
        self, user_id: str, note_id: str, description: str
    ) -> Note | None:
        """Replace a note's description.

        Returns:
            The updated note, or None if no note with that ID belongs to the user.

        Raises:
            Exception: If the update fails.
        """
        try:
            response = (
                self.client.table(NOTES_TABLE)
                .update({"description": description})
                .eq("id", note_id)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            logger.exception(
                "note_update_failed",
                note_id=note_id,
                error_type=type(e).__name__,
            )
            raise

        if not response.data:
            logger.warning("note_not_found", note_id=note_id, user_id=user_id)
            return None

        logger.info("note_updated", note_id=note_id)
        return _row_to_note(response.data[0])
