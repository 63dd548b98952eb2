"""pytest fixtures for SongPad backend tests.

Provides:
- engine: Function-scoped SQLite database (aiosqlite) with foreign keys enforced
- session_factory / uow_factory: Session and UnitOfWork factories over that database
- synthesis: In-process fake of the Mureka client
- tracker: SongTaskTracker wired to the fake client
- document: A persisted document owned by OWNER_ID
- test_client: httpx AsyncClient against a fresh FastAPI app
"""

import os

os.environ.setdefault("APP_ENV", "test")

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import songpad.models  # noqa: E402, F401
from songpad.core.config import Settings  # noqa: E402
from songpad.models.document import Document  # noqa: E402
from songpad.services.exceptions import SynthesisResponseError  # noqa: E402
from songpad.services.song_tasks.tracker import SongTaskTracker  # noqa: E402
from songpad.services.synthesis.schemas import MurekaTask  # noqa: E402
from songpad.uow import create_uow_factory  # noqa: E402

OWNER_ID = "user_owner"
OTHER_USER_ID = "user_other"


class FakeSynthesisClient:
    """Stands in for MurekaClient.

    generate_song() returns next_task (or raises generate_error).
    query_song() returns reports[task_id]; an Exception value is raised instead.
    """

    def __init__(self):
        self.next_task = MurekaTask(id="abc123", status="preparing", model="mureka-6")
        self.generate_error: Exception | None = None
        self.reports: dict[str, MurekaTask | Exception] = {}
        self.generate_calls: list[dict] = []
        self.query_calls: list[str] = []

    async def generate_song(self, lyrics: str, model: str, prompt: str) -> MurekaTask:
        self.generate_calls.append({"lyrics": lyrics, "model": model, "prompt": prompt})
        if self.generate_error is not None:
            raise self.generate_error
        return self.next_task

    async def query_song(self, task_id: str) -> MurekaTask:
        self.query_calls.append(task_id)
        report = self.reports.get(task_id)
        if report is None:
            raise SynthesisResponseError(f"No report configured for {task_id}")
        if isinstance(report, Exception):
            raise report
        return report


@pytest.fixture(scope="session", autouse=True)
def utc_timezone():
    """Enforce UTC timezone for all tests."""
    os.environ["TZ"] = "UTC"
    yield


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Provide a fresh SQLite database per test with all tables created.

    A file database with NullPool gives every session its own connection, like
    the PostgreSQL pool in production.
    """
    db_path = tmp_path / "songpad.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw session for repository-level tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def uow_factory(session_factory):
    return create_uow_factory(session_factory)


@pytest.fixture
def synthesis() -> FakeSynthesisClient:
    return FakeSynthesisClient()


@pytest.fixture
def tracker(uow_factory, synthesis) -> SongTaskTracker:
    return SongTaskTracker(uow_factory, synthesis, default_model="auto")


@pytest_asyncio.fixture
async def document(uow_factory) -> Document:
    """A document owned by OWNER_ID with two lines of lyrics."""
    async with await uow_factory() as uow:
        document = await uow.documents.add(
            Document(user_id=OWNER_ID, title="First song", content="verse one\nverse two")
        )
    return document


@pytest.fixture
def test_settings() -> Settings:
    return Settings(APP_ENV="test", MUREKA_API_KEY="test-key")  # type: ignore[call-arg]


@pytest_asyncio.fixture
async def test_client(test_settings, uow_factory, session_factory, synthesis):
    """Provide AsyncClient for testing API endpoints with database access.

    httpx does not run the lifespan, so app.state is populated here.
    """
    from songpad.app import create_app

    app = create_app(test_settings)
    app.state.session_factory = session_factory
    app.state.uow_factory = uow_factory
    app.state.synthesis_client = synthesis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
