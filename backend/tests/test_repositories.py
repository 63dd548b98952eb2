"""Repository tests against a real SQLite database.

Covers lookups, ordering, pending filters and the document → song task cascade.
"""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from songpad.models.document import Document
from songpad.models.song_task import SongTask, SongTaskStatus
from songpad.repositories.document import DocumentRepository
from songpad.repositories.song_task import SongTaskRepository

from conftest import OTHER_USER_ID, OWNER_ID

T0 = datetime(2026, 5, 1, 9, 0, 0)


async def add_document(session, user_id: str = OWNER_ID) -> Document:
    return await DocumentRepository(session).add(
        Document(user_id=user_id, title="Untitled", content="la la la")
    )


def make_task(document: Document, external_id: str, status: str = "preparing", offset: int = 0):
    return SongTask(
        document_id=document.id,
        external_task_id=external_id,
        status=status,
        created_at=T0 + timedelta(seconds=offset),
        updated_at=T0 + timedelta(seconds=offset),
    )


class TestDocumentRepository:
    @pytest.mark.asyncio
    async def test_add_and_get_by_id(self, session):
        document = await add_document(session)

        found = await DocumentRepository(session).get_by_id(document.id)

        assert found is not None
        assert found.is_owned_by(OWNER_ID)
        assert not found.is_owned_by(OTHER_USER_ID)

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, session):
        assert await DocumentRepository(session).get_by_id(uuid4()) is None

    @pytest.mark.asyncio
    async def test_delete_removes_song_tasks(self, session):
        document = await add_document(session)
        other = await add_document(session)
        tasks = SongTaskRepository(session)
        await tasks.add(make_task(document, "t1"))
        await tasks.add(make_task(document, "t2", status="succeeded"))
        await tasks.add(make_task(other, "t3"))

        removed = await DocumentRepository(session).delete(document)

        assert removed == 2
        assert await tasks.get_for_document(document.id) == []
        assert [t.external_task_id for t in await tasks.get_for_document(other.id)] == ["t3"]

    @pytest.mark.asyncio
    async def test_foreign_key_cascades_on_raw_delete(self, session):
        document = await add_document(session)
        await SongTaskRepository(session).add(make_task(document, "t1"))
        await session.commit()

        await session.execute(delete(Document).where(Document.id == document.id))
        await session.commit()

        result = await session.execute(select(SongTask))
        assert result.scalars().all() == []


class TestSongTaskRepository:
    @pytest.mark.asyncio
    async def test_get_by_external_id(self, session):
        document = await add_document(session)
        task = await SongTaskRepository(session).add(make_task(document, "abc123"))

        found = await SongTaskRepository(session).get_by_external_id("abc123")

        assert found is not None
        assert found.id == task.id
        assert await SongTaskRepository(session).get_by_external_id("nope") is None

    @pytest.mark.asyncio
    async def test_get_for_document_orders_oldest_first(self, session):
        document = await add_document(session)
        repo = SongTaskRepository(session)
        await repo.add(make_task(document, "late", offset=30))
        await repo.add(make_task(document, "early", offset=0))
        await repo.add(make_task(document, "middle", offset=10))

        tasks = await repo.get_for_document(document.id)

        assert [t.external_task_id for t in tasks] == ["early", "middle", "late"]

    @pytest.mark.asyncio
    async def test_external_task_id_is_unique(self, session):
        document = await add_document(session)
        repo = SongTaskRepository(session)
        await repo.add(make_task(document, "dup"))

        with pytest.raises(IntegrityError):
            await repo.add(make_task(document, "dup"))

    @pytest.mark.asyncio
    async def test_task_requires_existing_document(self, session):
        orphan = Document(user_id=OWNER_ID, title="never saved")

        with pytest.raises(IntegrityError):
            await SongTaskRepository(session).add(make_task(orphan, "orphan"))

    @pytest.mark.asyncio
    async def test_result_and_failure_cannot_coexist(self, session):
        document = await add_document(session)
        task = make_task(document, "both", status="failed")
        task.result_url = "https://x/a.mp3"
        task.failure_reason = "boom"

        with pytest.raises(IntegrityError):
            await SongTaskRepository(session).add(task)

    @pytest.mark.asyncio
    async def test_save_persists_status_change(self, session):
        document = await add_document(session)
        repo = SongTaskRepository(session)
        task = await repo.add(make_task(document, "abc123"))
        await session.commit()

        task.apply_status(SongTaskStatus.SUCCEEDED, result_url="https://x/a.mp3")
        await repo.save(task)
        await session.commit()
        session.expire_all()

        reloaded = await repo.get_by_external_id("abc123")
        assert reloaded.status == "succeeded"
        assert reloaded.result_url == "https://x/a.mp3"

    @pytest.mark.asyncio
    async def test_delete_single_task(self, session):
        document = await add_document(session)
        repo = SongTaskRepository(session)
        keep = await repo.add(make_task(document, "keep"))
        drop = await repo.add(make_task(document, "drop", offset=1))

        await repo.delete(drop)

        assert [t.id for t in await repo.get_for_document(document.id)] == [keep.id]
