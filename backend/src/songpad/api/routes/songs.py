"""Song generation API endpoints.

This module implements the REST endpoints used by the editor's song panel:
- POST /api/songs/generate - Start a song generation task for a document
- GET /api/songs/status/{task_id} - Raw synthesis API status (debugging)
- GET /api/songs/{document_id} - List a document's songs, refreshing pending ones
- DELETE /api/songs/{document_id}/{song_id} - Delete one song

All endpoints require the caller's user id and document ownership.
"""

from datetime import datetime
from typing import NoReturn, Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from songpad.api.dependencies import (
    get_current_user_id,
    get_poll_schedule,
    get_song_tracker,
    get_synthesis_client,
)
from songpad.models.song_task import SongTask
from songpad.services.exceptions import (
    DocumentAccessDeniedError,
    DocumentNotFoundError,
    GenreValidationError,
    LyricsValidationError,
    SongTaskNotFoundError,
    SynthesisConfigError,
    SynthesisError,
    TrackerError,
)
from songpad.services.song_tasks.polling import PollSchedule
from songpad.services.song_tasks.tracker import SongTaskTracker
from songpad.services.synthesis.prompts import Genre
from songpad.services.synthesis.schemas import MurekaTask, SongModel

logger = structlog.get_logger()
router = APIRouter(prefix="/api/songs", tags=["songs"])


# Request/Response Models


class GenerateSongRequest(BaseModel):
    """Request model for starting a song generation task."""

    document_id: UUID = Field(..., description="Document whose lyrics are sung")
    lyrics: Optional[str] = Field(
        default=None,
        description="Lyric text; defaults to the document content when omitted",
    )
    prompt: Optional[str] = Field(
        default=None,
        description="Free-text style prompt; overrides the genre preset",
        max_length=1000,
    )
    model: Optional[SongModel] = Field(default=None, description="Model variant")
    genre: Optional[Genre] = Field(default=None, description="Genre preset (default: rap)")


class SongTaskDTO(BaseModel):
    """Data Transfer Object for song tasks in API responses."""

    id: UUID
    document_id: UUID
    external_task_id: str
    status: str = Field(
        ...,
        description=(
            "preparing, queued, running, succeeded, failed, timed_out or cancelled"
        ),
    )
    result_url: Optional[str] = Field(default=None, description="Audio URL once succeeded")
    failure_reason: Optional[str] = None
    prompt: Optional[str] = None
    model: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_task(cls, task: SongTask) -> "SongTaskDTO":
        return cls(
            id=task.id,
            document_id=task.document_id,
            external_task_id=task.external_task_id,
            status=task.status,
            result_url=task.result_url,
            failure_reason=task.failure_reason,
            prompt=task.prompt,
            model=task.model,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class SongListResponse(BaseModel):
    """Response model for a document's songs."""

    songs: list[SongTaskDTO]
    poll_after_seconds: Optional[float] = Field(
        default=None,
        description="Seconds until the client should refresh; null when nothing is pending",
    )


def raise_http_error(error: Exception) -> NoReturn:
    """Translate tracker and synthesis errors into HTTP errors."""
    if isinstance(error, (LyricsValidationError, GenreValidationError)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, (DocumentNotFoundError, SongTaskNotFoundError)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, DocumentAccessDeniedError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    if isinstance(error, SynthesisConfigError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Song generation is not configured",
        )
    if isinstance(error, SynthesisError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))
    raise error


@router.post("/generate", response_model=SongTaskDTO, status_code=status.HTTP_201_CREATED)
async def generate_song(
    request: GenerateSongRequest,
    user_id: str = Depends(get_current_user_id),
    tracker: SongTaskTracker = Depends(get_song_tracker),
) -> SongTaskDTO:
    """Start a song generation task.

    HTTP Status Codes:
        201: Task created, status as reported by the synthesis API
        400: Lyrics empty or unknown genre
        403: Document belongs to another user
        404: Document not found
        502: Synthesis API failed (nothing persisted)
        503: Synthesis API key not configured
    """
    logger.info(
        "song.generate_requested",
        user_id=user_id,
        document_id=str(request.document_id),
        model=request.model,
        genre=request.genre,
    )
    try:
        task = await tracker.submit(
            user_id=user_id,
            document_id=request.document_id,
            lyrics=request.lyrics,
            prompt=request.prompt,
            model=request.model,
            genre=request.genre,
        )
    except (TrackerError, SynthesisError) as e:
        raise_http_error(e)

    return SongTaskDTO.from_task(task)


@router.get("/status/{task_id}", response_model=MurekaTask)
async def get_external_status(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    synthesis=Depends(get_synthesis_client),
) -> MurekaTask:
    """Return the synthesis API's view of a task without touching the database."""
    logger.info("song.status_requested", user_id=user_id, task_id=task_id)
    try:
        return await synthesis.query_song(task_id)
    except SynthesisError as e:
        logger.error("song.status_failed", task_id=task_id, error=str(e))
        raise_http_error(e)


@router.get("/{document_id}", response_model=SongListResponse)
async def list_songs(
    document_id: UUID,
    user_id: str = Depends(get_current_user_id),
    tracker: SongTaskTracker = Depends(get_song_tracker),
    schedule: PollSchedule = Depends(get_poll_schedule),
) -> SongListResponse:
    """List a document's songs, refreshing every pending one first.

    The response tells the client when to ask again; poll_after_seconds is null
    once every song has reached a terminal status.
    """
    try:
        tasks = await tracker.list_for_document(user_id, document_id)
    except TrackerError as e:
        raise_http_error(e)

    logger.info(
        "song.list_returned",
        document_id=str(document_id),
        count=len(tasks),
        pending=sum(1 for t in tasks if not t.is_terminal),
    )
    return SongListResponse(
        songs=[SongTaskDTO.from_task(t) for t in tasks],
        poll_after_seconds=schedule.next_delay(tasks),
    )


@router.delete("/{document_id}/{song_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_song(
    document_id: UUID,
    song_id: UUID,
    user_id: str = Depends(get_current_user_id),
    tracker: SongTaskTracker = Depends(get_song_tracker),
) -> Response:
    """Delete one song. The synthesis job itself is not cancelled."""
    try:
        await tracker.delete(user_id, document_id, song_id)
    except TrackerError as e:
        raise_http_error(e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
