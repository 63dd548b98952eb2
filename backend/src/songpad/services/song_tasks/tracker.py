"""Song task tracker.

Bridges long-running Mureka generation jobs to persisted SongTask rows:

- submit(): one call to the synthesis API, then one insert. Nothing is written
  when the API call fails.
- apply_webhook(): push path, the synthesis API reports a status change.
- list_for_document(): pull path, reading a document's songs refreshes every
  pending one by querying the synthesis API.
- delete(): drop a single task reference.

Both update paths write through SongTask.apply_status() and neither is
authoritative: the last write wins. External calls are never made inside a
write transaction; each database step runs in its own Unit of Work.
"""

from typing import Optional, Protocol
from uuid import UUID

import structlog

from songpad.models.document import Document
from songpad.models.song_task import SongTask, SongTaskStatus
from songpad.services.exceptions import (
    DocumentAccessDeniedError,
    DocumentNotFoundError,
    GenreValidationError,
    LyricsValidationError,
    SongTaskNotFoundError,
    SynthesisError,
)
from songpad.services.synthesis.prompts import resolve_prompt
from songpad.services.synthesis.schemas import MurekaTask
from songpad.uow import UnitOfWork

logger = structlog.get_logger()


class SynthesisClient(Protocol):
    async def generate_song(self, lyrics: str, model: str, prompt: str) -> MurekaTask: ...

    async def query_song(self, task_id: str) -> MurekaTask: ...


async def get_owned_document(uow: UnitOfWork, user_id: str, document_id: UUID) -> Document:
    """Load a document and check that user_id owns it.

    Raises:
        DocumentNotFoundError: No such document
        DocumentAccessDeniedError: Document belongs to someone else
    """
    document = await uow.documents.get_by_id(document_id)
    if document is None:
        raise DocumentNotFoundError(f"Document {document_id} not found")
    if not document.is_owned_by(user_id):
        raise DocumentAccessDeniedError(f"Access denied to document {document_id}")
    return document


class SongTaskTracker:
    """Submits song generation tasks and keeps their status current."""

    def __init__(self, uow_factory, synthesis: SynthesisClient, default_model: str = "auto"):
        """Initialize tracker.

        Args:
            uow_factory: Factory returned by create_uow_factory()
            synthesis: Synthesis API client (MurekaClient in production)
            default_model: Model variant used when the request names none
        """
        self.uow_factory = uow_factory
        self.synthesis = synthesis
        self.default_model = default_model

    async def submit(
        self,
        user_id: str,
        document_id: UUID,
        lyrics: Optional[str] = None,
        prompt: Optional[str] = None,
        model: Optional[str] = None,
        genre: Optional[str] = None,
    ) -> SongTask:
        """Start a song generation task for a document.

        Lyrics default to the document content. The persisted status is the one
        reported by the synthesis API, not a hardcoded initial value. There is no
        idempotency key: every call creates a new external job.

        Raises:
            DocumentNotFoundError, DocumentAccessDeniedError: Ownership check failed
            LyricsValidationError: Lyrics are empty
            GenreValidationError: Unknown genre
            SynthesisError: Synthesis API call failed (nothing persisted)
        """
        async with await self.uow_factory() as uow:
            document = await get_owned_document(uow, user_id, document_id)
            text = lyrics if lyrics is not None else document.content

        if not text or not text.strip():
            raise LyricsValidationError("Lyrics must not be empty to generate a song")

        try:
            style_prompt = resolve_prompt(prompt, genre)
        except ValueError as e:
            raise GenreValidationError(str(e)) from e
        model = model or self.default_model

        try:
            external = await self.synthesis.generate_song(
                lyrics=text, model=model, prompt=style_prompt
            )
        except SynthesisError as e:
            logger.error(
                "song_task.submit_failed",
                document_id=str(document_id),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise

        task = SongTask(
            document_id=document_id,
            external_task_id=external.id,
            status=external.status.value,
            prompt=style_prompt,
            model=external.model or model,
        )
        async with await self.uow_factory() as uow:
            await uow.song_tasks.add(task)

        logger.info(
            "song_task.submitted",
            song_id=str(task.id),
            document_id=str(document_id),
            external_task_id=task.external_task_id,
            status=task.status,
            model=task.model,
        )
        return task

    async def apply_webhook(self, report: MurekaTask) -> SongTask:
        """Apply a pushed status report to the matching task.

        Raises:
            SongTaskNotFoundError: No task has this external ID (nothing is created)
        """
        async with await self.uow_factory() as uow:
            task = await uow.song_tasks.get_by_external_id(report.id)
            if task is None:
                raise SongTaskNotFoundError(f"Song not found for task ID: {report.id}")

            self._warn_on_regression(task, report.status, source="webhook")
            changed = task.apply_status(
                report.status,
                result_url=report.result_url,
                failure_reason=report.failed_reason,
            )
            if changed:
                await uow.song_tasks.save(task)

        logger.info(
            "song_task.webhook_applied",
            song_id=str(task.id),
            external_task_id=report.id,
            status=task.status,
            changed=changed,
        )
        return task

    async def list_for_document(self, user_id: str, document_id: UUID) -> list[SongTask]:
        """Return a document's tasks after refreshing every pending one.

        Terminal tasks are returned as stored and never queried again. A pending
        task whose status query fails is marked failed, since no push may ever
        arrive for it.

        Raises:
            DocumentNotFoundError, DocumentAccessDeniedError: Ownership check failed
        """
        async with await self.uow_factory() as uow:
            await get_owned_document(uow, user_id, document_id)
            tasks = await uow.song_tasks.get_for_document(document_id)

        refreshed = []
        for task in tasks:
            if task.is_terminal:
                refreshed.append(task)
                continue
            try:
                refreshed.append(await self.refresh(task))
            except SongTaskNotFoundError:
                logger.info("song_task.deleted_during_refresh", song_id=str(task.id))
        return refreshed

    async def refresh(self, task: SongTask) -> SongTask:
        """Query the synthesis API for one pending task and write any change."""
        try:
            report = await self.synthesis.query_song(task.external_task_id)
        except SynthesisError as e:
            logger.warning(
                "song_task.query_failed",
                song_id=str(task.id),
                external_task_id=task.external_task_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return await self._write(task.id, lambda t, error=e: t.mark_query_failed(error))

        if report.status.value == task.status:
            return task

        logger.info(
            "song_task.status_changed",
            song_id=str(task.id),
            old_status=task.status,
            new_status=report.status.value,
        )
        return await self._write(
            task.id,
            lambda t: t.apply_status(
                report.status,
                result_url=report.result_url,
                failure_reason=report.failed_reason,
            ),
        )

    async def delete(self, user_id: str, document_id: UUID, song_id: UUID) -> None:
        """Delete one task of a document. The external job is left running.

        Raises:
            DocumentNotFoundError, DocumentAccessDeniedError: Ownership check failed
            SongTaskNotFoundError: Task missing or attached to another document
        """
        async with await self.uow_factory() as uow:
            await get_owned_document(uow, user_id, document_id)
            task = await uow.song_tasks.get_by_id(song_id)
            if task is None or task.document_id != document_id:
                raise SongTaskNotFoundError(f"Song {song_id} not found")
            await uow.song_tasks.delete(task)

        logger.info("song_task.deleted", song_id=str(song_id), document_id=str(document_id))

    async def _write(self, task_id: UUID, update) -> SongTask:
        """Reload a task in a fresh Unit of Work, apply update, persist if changed."""
        async with await self.uow_factory() as uow:
            task = await uow.song_tasks.get_by_id(task_id)
            if task is None:
                # Deleted while the query was in flight
                raise SongTaskNotFoundError(f"Song {task_id} not found")
            if update(task):
                await uow.song_tasks.save(task)
        return task

    def _warn_on_regression(self, task: SongTask, status: SongTaskStatus, source: str) -> None:
        # Last write wins, a late report can move a finished task backwards
        if task.is_terminal and not status.is_terminal:
            logger.warning(
                "song_task.status_regression",
                song_id=str(task.id),
                old_status=task.status,
                new_status=status.value,
                source=source,
            )
