"""Mureka webhook endpoints for song generation status updates.

Mureka posts the task object whenever a generation task changes status. The
handler only updates existing song tasks; it never creates one.
"""

import json

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from songpad.api.dependencies import get_song_tracker, validate_webhook_signature
from songpad.core.timezone import utcnow
from songpad.services.exceptions import SongTaskNotFoundError
from songpad.services.song_tasks.tracker import SongTaskTracker
from songpad.services.synthesis.schemas import MurekaTask

logger = structlog.get_logger()
router = APIRouter()


@router.post("/mureka")
async def receive_mureka_webhook(
    raw_body: bytes = Depends(validate_webhook_signature),
    tracker: SongTaskTracker = Depends(get_song_tracker),
):
    """Receive and apply a Mureka status notification.

    HTTP Status Codes:
        200: Status applied (also when nothing changed)
        400: Malformed JSON or payload
        401: Signature check failed (only with MUREKA_WEBHOOK_SECRET set)
        404: No song task for this external task ID
    """
    try:
        payload = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error("webhook.invalid_json", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid JSON payload: {str(e)}",
        )

    try:
        report = MurekaTask.model_validate(payload)
    except ValidationError as e:
        logger.error("webhook.invalid_payload", errors=e.errors(include_url=False))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload")

    logger.info(
        "webhook.received",
        task_id=report.id,
        status=report.status.value,
        choices=len(report.choices),
        has_failed_reason=bool(report.failed_reason),
    )

    try:
        task = await tracker.apply_webhook(report)
    except SongTaskNotFoundError as e:
        logger.error("webhook.song_not_found", task_id=report.id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return {
        "status": "success",
        "message": "Webhook processed successfully",
        "song_id": str(task.id),
        "task_status": task.status,
    }


@router.get("/mureka")
async def verify_mureka_webhook(challenge: str | None = None):
    """Endpoint verification: echo the challenge, or report that the hook is live."""
    if challenge:
        return PlainTextResponse(challenge)

    return {
        "message": "Mureka webhook endpoint is active",
        "timestamp": utcnow().isoformat(),
    }
