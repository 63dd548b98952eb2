"""Document repository for SongPad backend.

Provides the data access the song tracker needs for documents: lookup for
ownership checks, insert, and delete with song task cascade.
"""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from songpad.models.document import Document
from songpad.models.song_task import SongTask


class DocumentRepository:
    """Repository for Document entities."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session for database operations
        """
        self.session = session

    async def get_by_id(self, document_id: UUID) -> Document | None:
        """Retrieve document by UUID.

        Args:
            document_id: Document's unique identifier

        Returns:
            Document if found, None otherwise
        """
        result = await self.session.execute(
            select(Document).where(Document.id == document_id)  # type: ignore[arg-type]
        )
        return result.scalar_one_or_none()

    async def add(self, document: Document) -> Document:
        """Persist new document to database.

        Args:
            document: Document entity to persist

        Returns:
            Persisted document with generated ID
        """
        self.session.add(document)
        await self.session.flush()
        return document

    async def delete(self, document: Document) -> int:
        """Delete a document together with all of its song tasks.

        The song_tasks foreign key cascades on delete, but child rows are removed
        explicitly first so the result is the same on backends that do not
        enforce foreign keys. Generated audio is not touched, only the references.

        Args:
            document: Document entity to delete

        Returns:
            Number of song tasks removed
        """
        result = await self.session.execute(
            delete(SongTask).where(SongTask.document_id == document.id)  # type: ignore[arg-type]
        )
        await self.session.delete(document)
        await self.session.flush()
        return result.rowcount or 0  # type: ignore[attr-defined]
