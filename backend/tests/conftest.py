"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

# Keep tests off any real provider or database configured in the environment
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite+aiosqlite://"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from learning_lab.api.deps import get_capabilities, get_repository
from learning_lab.db.base import Base
from learning_lab.db.models import MessageRole
from learning_lab.db.session import build_engine
from learning_lab.main import app
from learning_lab.repositories import MemoryRepository, SqlRepository
from learning_lab.repositories.sql import _persistence_errors
from learning_lab.schemas.generation import MindMap, MindMapBranch, SubjectClassification
from learning_lab.services.capabilities import Capabilities

LONG_REPLY = (
    "Photosynthesis is how plants turn light, water and carbon dioxide into "
    "glucose and oxygen inside their chloroplasts."
)


# =============================================================================
# CAPABILITY FAKES
# =============================================================================


class FakeClassifier:
    def __init__(self):
        self.result = SubjectClassification(
            subject="Biology", category="science", icon="🧬", confidence=0.95
        )
        self.error: Exception | None = None
        self.calls: list[str] = []

    async def classify(self, text: str) -> SubjectClassification:
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.result


class FakeTitles:
    def __init__(self):
        self.title = "Plant Energy Basics"
        self.error: Exception | None = None
        self.calls: list[str] = []

    async def title_for(self, text: str) -> str:
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.title


class FakeTutor:
    def __init__(self):
        self.reply = LONG_REPLY
        self.error: Exception | None = None
        self.calls: list[tuple[str, str, int | None]] = []

    async def respond(self, system_prompt: str, user_text: str, *, max_tokens: int | None = None) -> str:
        self.calls.append((system_prompt, user_text, max_tokens))
        if self.error:
            raise self.error
        return self.reply


class FakeVisuals:
    def __init__(self):
        self.url = "https://images.example.com/photosynthesis.png"
        self.mind_map = MindMap(
            central_topic="Photosynthesis",
            branches=[MindMapBranch(label="Inputs", children=["Light", "Water", "CO2"])],
        )
        self.image_error: Exception | None = None
        self.mindmap_error: Exception | None = None
        self.image_calls: list[str] = []
        self.mindmap_calls: list[str] = []

    async def image(self, prompt: str) -> str:
        self.image_calls.append(prompt)
        if self.image_error:
            raise self.image_error
        return self.url

    async def mindmap(self, prompt: str) -> MindMap:
        self.mindmap_calls.append(prompt)
        if self.mindmap_error:
            raise self.mindmap_error
        return self.mind_map


class FakeSpeech:
    def __init__(self):
        self.audio = b"ID3fake-mp3-bytes"
        self.error: Exception | None = None

    async def speak(self, text: str) -> bytes:
        if self.error:
            raise self.error
        return self.audio


@pytest.fixture
def capabilities() -> Capabilities:
    """Capabilities bundle of controllable fakes (reach them via the attributes)."""
    return Capabilities(
        classifier=FakeClassifier(),
        titles=FakeTitles(),
        tutor=FakeTutor(),
        visuals=FakeVisuals(),
        speech=FakeSpeech(),
    )


# =============================================================================
# REPOSITORIES
# =============================================================================


@pytest.fixture
def memory_repository() -> MemoryRepository:
    return MemoryRepository()


@asynccontextmanager
async def sqlite_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh in-memory SQLite database with foreign keys enforced."""
    engine = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as session:
            yield session
    finally:
        await engine.dispose()


@pytest.fixture
async def sql_session() -> AsyncGenerator[AsyncSession, None]:
    async with sqlite_session() as session:
        yield session


@pytest.fixture
def sql_repository(sql_session: AsyncSession) -> SqlRepository:
    return SqlRepository(sql_session)


# =============================================================================
# FAILING SQL REPOSITORIES
# =============================================================================


class BrokenDatabaseMixin:
    """Raises a driver error through the repository's own error translation."""

    @_persistence_errors
    async def _broken_write(self, table: str):
        raise OperationalError(f"INSERT INTO {table}", {}, Exception("database is locked"))


class BookkeepingFailsRepository(BrokenDatabaseMixin, SqlRepository):
    """Interest and progress writes fail; everything else works."""

    async def create_interest(self, user_id, interest, progress=0):
        return await self._broken_write("user_interests")

    async def upsert_learning_progress(self, user_id, topic, progress, visuals_generated):
        return await self._broken_write("learning_progress")


class AssistantMessageFailsRepository(BrokenDatabaseMixin, SqlRepository):
    """User messages are stored; storing the assistant reply fails."""

    async def create_message(self, conversation_id, role, content, **kwargs):
        if MessageRole(role) is MessageRole.ASSISTANT:
            return await self._broken_write("messages")
        return await super().create_message(conversation_id, role, content, **kwargs)


class TouchFailsRepository(BrokenDatabaseMixin, SqlRepository):
    """Renaming works, but the final updated_at bump fails."""

    async def update_conversation(self, conversation_id, *, title=None):
        if title is None:
            return await self._broken_write("conversations")
        return await super().update_conversation(conversation_id, title=title)


@pytest.fixture
def bookkeeping_fails_repository(sql_session: AsyncSession) -> SqlRepository:
    return BookkeepingFailsRepository(sql_session)


@pytest.fixture
def assistant_message_fails_repository(sql_session: AsyncSession) -> SqlRepository:
    return AssistantMessageFailsRepository(sql_session)


@pytest.fixture
def touch_fails_repository(sql_session: AsyncSession) -> SqlRepository:
    return TouchFailsRepository(sql_session)


@pytest.fixture(params=["memory", "sql"])
async def repository(request):
    """Runs a test once per repository implementation."""
    if request.param == "memory":
        yield MemoryRepository()
        return
    async with sqlite_session() as session:
        yield SqlRepository(session)


# =============================================================================
# HTTP CLIENT
# =============================================================================


@pytest.fixture
async def client(
    memory_repository: MemoryRepository,
    capabilities: Capabilities,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    app.dependency_overrides[get_repository] = lambda: memory_repository
    app.dependency_overrides[get_capabilities] = lambda: capabilities
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
