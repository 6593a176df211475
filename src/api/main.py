"""FastAPI application for the StudyTube assistant.

Provides the transcript endpoint, the streaming answer endpoint (the caller's
provider API key arrives as a bearer token), video indexing and the notes
store.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Security
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict, Field

from src.chat.messages import STREAM_ERROR_MARKER
from src.chat.note_references import parse_note_references
from src.study_pipeline.config import get_config
from src.study_pipeline.errors import (
    AuthError,
    StudyAssistantError,
    ValidationError,
)
from src.study_pipeline.notes_service import NotesService
from src.study_pipeline.pipeline import StudyPipeline
from src.study_pipeline.transcript_service import TranscriptService
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Global services initialized in lifespan
transcript_service: TranscriptService | None = None
pipeline: StudyPipeline | None = None
notes_service: NotesService | None = None


class ServiceNotConfigured(StudyAssistantError):
    status_code = 503
    error = "Service not configured"


# Statuses /answer may return; every other taxonomy error becomes a 500
ANSWER_ERROR_STATUSES = frozenset({400, 401, 403, 429, 500})


# ==============================================================================
# Lifespan Management
# ==============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[misc]
    """Lifecycle manager for the FastAPI application.

    Builds the shared services once. The transcript cache lives inside the
    transcript service, so every request shares it.
    """
    global transcript_service, pipeline, notes_service

    logger.info("application_startup_started")

    try:
        config = get_config()
        transcript_service = TranscriptService(config)
        pipeline = StudyPipeline(config, transcript_service=transcript_service)
        if config.notes_store_enabled:
            notes_service = NotesService(config)

        logger.info(
            "application_startup_completed",
            vector_store=config.vector_store_enabled,
            notes_store=notes_service is not None,
        )

    except Exception:
        logger.exception("application_startup_failed")
        raise

    yield  # Application runs here

    logger.info("application_shutdown_completed")


# ==============================================================================
# FastAPI Application Setup
# ==============================================================================

app = FastAPI(
    title="StudyTube Assistant API",
    description="Transcript-grounded Q&A about YouTube videos with streaming answers",
    version="1.0.0",
    lifespan=lifespan,
)

security = HTTPBearer(auto_error=False)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==============================================================================
# Error Handling
# ==============================================================================


@app.exception_handler(StudyAssistantError)
async def study_assistant_error_handler(request: Request, exc: StudyAssistantError):
    """Map the error taxonomy onto HTTP status codes and ``{error, details}``."""
    logger.warning(
        "request_failed",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.error,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": ValidationError.error, "details": details},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions - log details but don't expose to client"""
    logger.exception("unhandled_exception", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ==============================================================================
# Request Models
# ==============================================================================


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TranscriptRequest(_CamelModel):
    video_id: str | None = Field(default=None, alias="videoId")


class AnswerRequest(_CamelModel):
    text: str | None = None
    video_id: str | None = Field(default=None, alias="videoId")
    context: str | None = None
    provider: str | None = None
    language: str = "English"
    reference_timestamp: str | float | None = Field(default=None, alias="referenceTimestamp")
    reference_description: str | None = Field(default=None, alias="referenceDescription")
    user_id: str | None = Field(default=None, alias="userId")


class NoteCreateRequest(_CamelModel):
    user_id: str = Field(alias="userId")
    video_id: str = Field(alias="videoId")
    timestamp: str
    time_in_seconds: float = Field(alias="timeInSeconds")
    description: str = ""
    image_url: str | None = Field(default=None, alias="imageUrl")


class NoteUpdateRequest(_CamelModel):
    user_id: str = Field(alias="userId")
    description: str


# ==============================================================================
# Helper Functions
# ==============================================================================


def _require_pipeline() -> StudyPipeline:
    if pipeline is None:
        raise ServiceNotConfigured("Pipeline not initialized")
    return pipeline


def _require_transcript_service() -> TranscriptService:
    if transcript_service is None:
        raise ServiceNotConfigured("Transcript service not initialized")
    return transcript_service


def _require_notes_service() -> NotesService:
    if notes_service is None:
        raise ServiceNotConfigured("Notes store is not configured")
    return notes_service


def _require_fields(**fields: Any) -> None:
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", details=missing)


async def _stream_body(first: str, stream: AsyncIterator[str]) -> AsyncIterator[bytes]:
    """Stream answer fragments, ending with an error marker on provider failure."""
    try:
        if first:
            yield first.encode("utf-8")
        async for fragment in stream:
            yield fragment.encode("utf-8")
    except StudyAssistantError as e:
        logger.warning("answer_stream_interrupted", error=e.error, details=e.message)
        yield f"{STREAM_ERROR_MARKER}{e.error}: {e.message}".encode()
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()


# ==============================================================================
# API Endpoints
# ==============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint.

    Returns:
        Health status and timestamp.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "services": {
            "transcript_service": transcript_service is not None,
            "pipeline": pipeline is not None,
            "vector_store": bool(pipeline and pipeline.vector_store_service is not None),
            "notes_store": notes_service is not None,
        },
    }


@app.post("/transcript")
async def transcript_endpoint(request: TranscriptRequest):
    """Return the cached or freshly fetched transcript of a video."""
    _require_fields(videoId=request.video_id)

    segments = await _require_transcript_service().get_transcript(request.video_id)
    return {
        "success": True,
        "transcript": [segment.model_dump() for segment in segments],
    }


@app.post("/index")
async def index_endpoint(request: TranscriptRequest):
    """Index a video's transcript into its vector namespace."""
    _require_fields(videoId=request.video_id)

    result = await _require_pipeline().index_video(request.video_id)
    return result.model_dump()


@app.post("/answer")
async def answer_endpoint(
    request: AnswerRequest,
    credentials: HTTPAuthorizationCredentials | None = Security(security),
):
    """Stream an answer about a video from the requested provider.

    The provider API key is taken from the ``Authorization: Bearer`` header.
    Failures before the first fragment return a JSON error with the matching
    status; failures after it end the text stream with an error marker.

    Returns:
        StreamingResponse of plain-text answer fragments.
    """
    api_key = credentials.credentials if credentials else ""
    if not api_key:
        raise AuthError("Missing API key in Authorization header")
    _require_fields(text=request.text, videoId=request.video_id)

    logger.info(
        "answer_request_started",
        video_id=request.video_id,
        provider=request.provider,
        question_length=len(request.text),
    )

    try:
        question = request.text
        if request.user_id and notes_service is not None and "@note" in question:
            notes = await notes_service.get_notes(request.user_id, request.video_id)
            question = parse_note_references(question, notes).prompt

        stream = await _require_pipeline().answer_stream(
            request.video_id,
            question,
            api_key,
            provider=request.provider,
            context=request.context,
            language=request.language,
            reference_timestamp=request.reference_timestamp,
            reference_description=request.reference_description,
        )

        # Pull the first fragment so key and quota errors still get a status code
        try:
            first = await anext(stream)
        except StopAsyncIteration:
            first = ""

    except StudyAssistantError as e:
        if e.status_code in ANSWER_ERROR_STATUSES:
            raise
        # Answer clients only understand the 400/401/403/429/500 set
        logger.warning(
            "answer_request_failed",
            video_id=request.video_id,
            error=e.error,
            status_code=e.status_code,
        )
        return JSONResponse(status_code=500, content=e.to_payload())

    return StreamingResponse(
        _stream_body(first, stream),
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": "no-cache"},
    )


@app.get("/notes")
async def list_notes(userId: str, videoId: str):  # noqa: N803
    """List a user's notes for a video in timestamp order."""
    notes = await _require_notes_service().get_notes(userId, videoId)
    return {"notes": [note.model_dump(mode="json") for note in notes]}


@app.post("/notes", status_code=201)
async def create_note(request: NoteCreateRequest):
    note = await _require_notes_service().create_note(
        user_id=request.user_id,
        video_id=request.video_id,
        timestamp=request.timestamp,
        time_in_seconds=request.time_in_seconds,
        description=request.description,
        image_url=request.image_url,
    )
    return note.model_dump(mode="json")


@app.patch("/notes/{note_id}")
async def update_note(note_id: str, request: NoteUpdateRequest):
    note = await _require_notes_service().update_note_description(
        request.user_id, note_id, request.description
    )
    if note is None:
        return JSONResponse(status_code=404, content={"error": "Note not found"})
    return note.model_dump(mode="json")
