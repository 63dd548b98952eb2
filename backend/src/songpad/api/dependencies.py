"""FastAPI dependencies for request validation and common operations.

This module provides reusable FastAPI dependencies for:
- Settings and service lookup from app.state
- Caller identity forwarded by the identity provider
- Webhook signature validation
"""

from typing import Annotated, Callable

import structlog
from fastapi import Depends, Header, HTTPException, Request, status

from songpad.core.config import Settings
from songpad.services.song_tasks.polling import PollSchedule
from songpad.services.song_tasks.tracker import SongTaskTracker
from songpad.services.synthesis.mureka_client import MurekaClient
from songpad.services.synthesis.webhook_signature import validate_mureka_signature
from songpad.uow import UnitOfWork

logger = structlog.get_logger()


def get_settings(request: Request) -> Settings:
    """Get application settings stored on app.state by create_app()."""
    return request.app.state.settings


def get_uow_factory(request: Request) -> Callable[[], UnitOfWork]:
    """Get UnitOfWork factory from app state.

    Example:
        >>> @router.get("/endpoint")
        >>> async def endpoint(uow_factory=Depends(get_uow_factory)):
        ...     async with await uow_factory() as uow:
        ...         await uow.documents.get_by_id(document_id)
    """
    return request.app.state.uow_factory


def get_synthesis_client(request: Request) -> MurekaClient:
    """Get the synthesis API client from app state."""
    return request.app.state.synthesis_client


def get_song_tracker(
    uow_factory=Depends(get_uow_factory),
    synthesis=Depends(get_synthesis_client),
    settings: Settings = Depends(get_settings),
) -> SongTaskTracker:
    """Build a SongTaskTracker over the request's app state."""
    return SongTaskTracker(uow_factory, synthesis, default_model=settings.default_song_model)


def get_poll_schedule(settings: Settings = Depends(get_settings)) -> PollSchedule:
    return PollSchedule.from_settings(settings)


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """Return the authenticated user id.

    Authentication happens in front of this service; the identity provider's edge
    forwards the verified user id in the X-User-Id header.

    Raises:
        HTTPException: 401 Unauthorized if the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_user_id.strip()


async def validate_webhook_signature(
    request: Request,
    x_mureka_signature: Annotated[str | None, Header()] = None,
    settings: Settings = Depends(get_settings),
) -> bytes:
    """Validate the Mureka webhook signature before processing the request.

    Validation only takes effect when MUREKA_WEBHOOK_SECRET is configured;
    otherwise every delivery is accepted.

    Returns:
        Raw request body bytes (for further processing by the endpoint)

    Raises:
        HTTPException: 401 Unauthorized if a configured signature check fails
    """
    raw_body = await request.body()

    if not validate_mureka_signature(
        raw_body=raw_body,
        signature=x_mureka_signature,
        signing_key=settings.mureka_webhook_secret,
    ):
        logger.warning("webhook.invalid_signature", has_signature=bool(x_mureka_signature))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature"
        )

    return raw_body
