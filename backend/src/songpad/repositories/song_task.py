"""SongTask repository for SongPad backend.

Provides data access methods for SongTask entities. Status changes are applied on
the entity (SongTask.apply_status) and persisted here with save().
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from songpad.models.song_task import SongTask


class SongTaskRepository:
    """Repository for SongTask entities."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session for database operations
        """
        self.session = session

    async def add(self, task: SongTask) -> SongTask:
        """Persist new song task to database.

        Args:
            task: SongTask entity to persist

        Returns:
            Persisted task with generated ID
        """
        self.session.add(task)
        await self.session.flush()
        return task

    async def get_by_id(self, task_id: UUID) -> SongTask | None:
        """Retrieve song task by local UUID.

        Args:
            task_id: Task's unique identifier

        Returns:
            SongTask if found, None otherwise
        """
        result = await self.session.execute(
            select(SongTask).where(SongTask.id == task_id)  # type: ignore[arg-type]
        )
        return result.scalar_one_or_none()

    async def get_by_external_id(self, external_task_id: str) -> SongTask | None:
        """Retrieve song task by the identifier assigned by the synthesis API.

        Args:
            external_task_id: Synthesis API task ID (unique)

        Returns:
            SongTask if found, None otherwise
        """
        result = await self.session.execute(
            select(SongTask).where(SongTask.external_task_id == external_task_id)  # type: ignore[arg-type]
        )
        return result.scalar_one_or_none()

    async def get_for_document(self, document_id: UUID) -> list[SongTask]:
        """Retrieve all song tasks of a document, oldest first.

        Args:
            document_id: Owning document's unique identifier

        Returns:
            List of tasks ordered by creation time
        """
        result = await self.session.execute(
            select(SongTask)
            .where(SongTask.document_id == document_id)  # type: ignore[arg-type]
            .order_by(SongTask.created_at.asc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def save(self, task: SongTask) -> SongTask:
        """Flush pending changes of an attached or detached task.

        Args:
            task: SongTask entity with updated fields

        Returns:
            The task, merged into this session
        """
        merged = await self.session.merge(task)
        await self.session.flush()
        return merged

    async def delete(self, task: SongTask) -> None:
        """Delete a single song task. No external cancellation is attempted."""
        await self.session.delete(task)
        await self.session.flush()
