"""
Shared test fixtures and configuration for entire test suite.

Provides: temp-file SQLite database, stores and services wired to it,
in-process fakes for the model, context cache, vector index and documents.
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
import uuid

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from researchly.application.services import (
    AIOperationEngine,
    ContextCacheManager,
    NotesService,
    PaperService,
    RetrievalIndexService,
    SessionStore,
)
from researchly.boundary.db.connection import create_tables
from researchly.boundary.db.models import PaperModel
from researchly.core.exceptions import CacheTooSmallError, ProviderError

PAPER_TEXT = (
    "We study retrieval augmented generation for scientific papers. "
    "The method uses a transformer encoder trained with contrastive loss. "
    "Results show a 12 percent improvement over the baseline. "
) * 40


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeChatModel:
    """Streams configured fragments and records every call."""

    def __init__(self, fragments: list[str] | None = None) -> None:
        self.fragments = fragments if fragments is not None else ["The method ", "was ", "contrastive."]
        self.fail_after: int | None = None
        self.calls: list[dict] = []

    async def _emit(self) -> AsyncIterator[str]:
        for i, fragment in enumerate(self.fragments):
            if self.fail_after is not None and i >= self.fail_after:
                raise ProviderError("Language model request failed", provider="model")
            yield fragment
        if self.fail_after is not None and self.fail_after >= len(self.fragments):
            raise ProviderError("Language model request failed", provider="model")

    async def stream(self, messages, temperature: float) -> AsyncIterator[str]:
        self.calls.append({"kind": "direct", "messages": messages, "temperature": temperature})
        async for fragment in self._emit():
            yield fragment

    async def stream_with_cache(self, cache_name: str, messages, temperature: float) -> AsyncIterator[str]:
        self.calls.append(
            {"kind": "cached", "cache_name": cache_name, "messages": messages, "temperature": temperature}
        )
        async for fragment in self._emit():
            yield fragment


class FakeCacheClient:
    """In-memory context cache provider."""

    def __init__(self) -> None:
        self.live: set[str] = set()
        self.created: list[str] = []
        self.deleted: list[str] = []
        self.liveness_checks: list[str] = []
        self.too_small = False
        self.create_error: Exception | None = None
        self.lookup_error: Exception | None = None
        self.delete_error: Exception | None = None

    async def create(self, display_name: str, system_instruction: str, document: bytes, ttl_seconds: int) -> str:
        if self.too_small:
            raise CacheTooSmallError()
        if self.create_error is not None:
            raise self.create_error
        name = f"cachedContents/{len(self.created) + 1}"
        self.created.append(name)
        self.live.add(name)
        return name

    async def is_live(self, name: str) -> bool:
        self.liveness_checks.append(name)
        if self.lookup_error is not None:
            raise self.lookup_error
        return name in self.live

    async def delete(self, name: str) -> None:
        self.deleted.append(name)
        if self.delete_error is not None:
            raise self.delete_error
        self.live.discard(name)


class FakeVectorIndex:
    """In-memory namespace index returning passages that share a word with the query."""

    def __init__(self) -> None:
        self.namespaces: dict[str, list[str]] = {}
        self.upserts = 0
        self.query_error: Exception | None = None
        self.delete_error: Exception | None = None

    async def upsert(self, namespace: str, passages: list[str]) -> int:
        self.upserts += 1
        self.namespaces.setdefault(namespace, []).extend(passages)
        return len(passages)

    async def query(self, namespace: str, text: str, k: int) -> list[str]:
        if self.query_error is not None:
            raise self.query_error
        words = set(text.lower().split())
        passages = self.namespaces.get(namespace, [])
        hits = [p for p in passages if words & set(p.lower().split())]
        return hits[:k]

    async def delete_namespace(self, namespace: str) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        self.namespaces.pop(namespace, None)


@pytest.fixture
async def db_engine(tmp_path):
    """
    Create a temp-file SQLite database with all tables.

    NullPool gives every AsyncSession its own connection, so concurrent
    store calls behave like separate database clients.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'researchly.db'}",
        poolclass=NullPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    """Provide async session factory bound to the test database."""
    return async_sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_store(session_factory, clock) -> SessionStore:
    return SessionStore(session_factory, clock=clock)


@pytest.fixture
def user_id() -> str:
    return "user-1"


@pytest.fixture
async def paper_id(session_factory, user_id) -> str:
    """Insert a paper owned by user_id and return its id as sent by clients."""
    async with session_factory() as db, db.begin():
        paper = PaperModel(
            id=uuid.uuid4(),
            user_id=user_id,
            title="Contrastive Retrieval for Papers",
            file_name="paper.pdf",
            file_url="https://files.example.test/paper.pdf",
            storage_path="papers/paper.pdf",
        )
        db.add(paper)
    return str(paper.id)


@pytest.fixture
def fake_fetcher() -> AsyncMock:
    fetcher = AsyncMock()
    fetcher.fetch = AsyncMock(return_value=b"%PDF-1.4 fake paper bytes")
    return fetcher


@pytest.fixture
def fake_extractor() -> AsyncMock:
    extractor = AsyncMock()
    extractor.extract = AsyncMock(return_value=PAPER_TEXT)
    return extractor


@pytest.fixture
def paper_service(session_factory, fake_fetcher, fake_extractor) -> PaperService:
    return PaperService(session_factory, fake_fetcher, fake_extractor)


@pytest.fixture
def fake_model() -> FakeChatModel:
    return FakeChatModel()


@pytest.fixture
def fake_cache_client() -> FakeCacheClient:
    return FakeCacheClient()


@pytest.fixture
def fake_vector_index() -> FakeVectorIndex:
    return FakeVectorIndex()


@pytest.fixture
def cache_manager(fake_cache_client, session_store, clock) -> ContextCacheManager:
    return ContextCacheManager(fake_cache_client, session_store, ttl_seconds=3600, clock=clock)


@pytest.fixture
def retrieval_service(fake_vector_index, session_store) -> RetrievalIndexService:
    return RetrievalIndexService(fake_vector_index, session_store, chunk_size=200, chunk_overlap=40)


@pytest.fixture
def make_engine(paper_service, session_store, cache_manager, retrieval_service, fake_model):
    """Build an AIOperationEngine for a given strategy."""

    def _make(strategy: str = "cache") -> AIOperationEngine:
        return AIOperationEngine(
            papers=paper_service,
            sessions=session_store,
            cache=cache_manager,
            retrieval=retrieval_service,
            model=fake_model,
            strategy=strategy,
            temperature=0.3,
            define_temperature=0.2,
        )

    return _make


@pytest.fixture
def notes_service(session_factory) -> NotesService:
    return NotesService(session_factory)


async def collect(events) -> list:
    """Drain an async event stream into a list."""
    return [event async for event in events]
