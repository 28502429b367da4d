"""
Test suite for ContextCacheManager.

Uses the in-memory cache provider fake and a real session store so handle
persistence is observed through the database.

System role: Verification of context cache lifecycle
"""

from datetime import timedelta
from unittest.mock import AsyncMock
import uuid

import pytest

from researchly.application.services.context_cache import ContextCacheManager
from researchly.application.services.session_store import SessionStore
from researchly.core.exceptions import ProviderError
from researchly.models.session import CacheHandle

PDF = b"%PDF-1.4 large paper"


@pytest.fixture
def load_document() -> AsyncMock:
    return AsyncMock(return_value=PDF)


@pytest.fixture
async def session(session_store: SessionStore):
    return await session_store.get_or_create(uuid.uuid4(), "user-1")


class TestContextCacheManagerEnsure:
    """Test suite for ContextCacheManager.ensure."""

    async def test_ensure_should_create_cache_with_ttl(
        self, cache_manager: ContextCacheManager, fake_cache_client, session_store, session, clock, load_document
    ) -> None:
        # Act
        handle = await cache_manager.ensure(session, "A Paper", load_document)

        # Assert
        assert handle is not None
        assert handle.name == fake_cache_client.created[0]
        assert handle.expires_at == clock.now + timedelta(seconds=3600)
        stored = await session_store.get(session.paper_id, "user-1")
        assert stored.cache_handle == handle
        load_document.assert_awaited_once()

    async def test_ensure_should_reuse_live_handle(
        self, cache_manager: ContextCacheManager, fake_cache_client, session_store, session, load_document
    ) -> None:
        # Arrange
        first = await cache_manager.ensure(session, "A Paper", load_document)
        current = await session_store.get(session.paper_id, "user-1")

        # Act
        second = await cache_manager.ensure(current, "A Paper", load_document)
        third = await cache_manager.ensure(current, "A Paper", load_document)

        # Assert
        assert second == first
        assert third == first
        assert len(fake_cache_client.created) == 1
        assert fake_cache_client.liveness_checks == [first.name, first.name]
        load_document.assert_awaited_once()

    async def test_ensure_should_replace_expired_handle_without_remote_check(
        self, cache_manager: ContextCacheManager, fake_cache_client, session_store, session, clock, load_document
    ) -> None:
        # Arrange
        first = await cache_manager.ensure(session, "A Paper", load_document)
        current = await session_store.get(session.paper_id, "user-1")
        clock.advance(4000)

        # Act
        second = await cache_manager.ensure(current, "A Paper", load_document)

        # Assert
        assert second.name != first.name
        assert second.expires_at == clock.now + timedelta(seconds=3600)
        assert fake_cache_client.liveness_checks == []
        assert first.name in fake_cache_client.deleted
        stored = await session_store.get(session.paper_id, "user-1")
        assert stored.cache_handle == second

    async def test_ensure_should_recreate_when_provider_evicted_cache(
        self, cache_manager: ContextCacheManager, fake_cache_client, session_store, session, load_document
    ) -> None:
        first = await cache_manager.ensure(session, "A Paper", load_document)
        fake_cache_client.live.clear()
        current = await session_store.get(session.paper_id, "user-1")

        second = await cache_manager.ensure(current, "A Paper", load_document)

        assert second.name != first.name
        assert len(fake_cache_client.created) == 2

    async def test_ensure_should_recreate_when_revalidation_fails(
        self, cache_manager: ContextCacheManager, fake_cache_client, session_store, session, load_document
    ) -> None:
        first = await cache_manager.ensure(session, "A Paper", load_document)
        fake_cache_client.lookup_error = ProviderError("lookup failed", provider="cache")
        current = await session_store.get(session.paper_id, "user-1")

        second = await cache_manager.ensure(current, "A Paper", load_document)

        assert second.name != first.name
        assert fake_cache_client.deleted == [first.name]

    async def test_ensure_should_return_none_for_undersized_document(
        self, cache_manager: ContextCacheManager, fake_cache_client, session_store, session, load_document
    ) -> None:
        # Arrange
        fake_cache_client.too_small = True

        # Act
        handle = await cache_manager.ensure(session, "A Paper", load_document)

        # Assert
        assert handle is None
        stored = await session_store.get(session.paper_id, "user-1")
        assert stored.cache_handle is None

    async def test_ensure_should_clear_stale_handle_when_recreation_is_too_small(
        self, cache_manager: ContextCacheManager, fake_cache_client, session_store, session, clock, load_document
    ) -> None:
        await cache_manager.ensure(session, "A Paper", load_document)
        current = await session_store.get(session.paper_id, "user-1")
        clock.advance(4000)
        fake_cache_client.too_small = True

        handle = await cache_manager.ensure(current, "A Paper", load_document)

        assert handle is None
        stored = await session_store.get(session.paper_id, "user-1")
        assert stored.cache_name is None
        assert stored.cache_expires_at is None

    async def test_ensure_should_propagate_other_creation_failures(
        self, cache_manager: ContextCacheManager, fake_cache_client, session, load_document
    ) -> None:
        fake_cache_client.create_error = ProviderError("quota exceeded", provider="cache")

        with pytest.raises(ProviderError):
            await cache_manager.ensure(session, "A Paper", load_document)


class TestContextCacheManagerInvalidate:
    """Test suite for ContextCacheManager.invalidate."""

    async def test_invalidate_should_delete_remote_cache(
        self, cache_manager: ContextCacheManager, fake_cache_client, clock
    ) -> None:
        handle = CacheHandle(name="cachedContents/9", expires_at=clock.now)

        await cache_manager.invalidate(handle)

        assert fake_cache_client.deleted == ["cachedContents/9"]

    async def test_invalidate_should_swallow_provider_failures(
        self, cache_manager: ContextCacheManager, fake_cache_client, clock
    ) -> None:
        fake_cache_client.delete_error = ProviderError("not found", provider="cache")
        handle = CacheHandle(name="cachedContents/9", expires_at=clock.now)

        await cache_manager.invalidate(handle)

        assert fake_cache_client.deleted == ["cachedContents/9"]

    async def test_invalidate_should_ignore_missing_handle(
        self, cache_manager: ContextCacheManager, fake_cache_client
    ) -> None:
        await cache_manager.invalidate(None)

        assert fake_cache_client.deleted == []
