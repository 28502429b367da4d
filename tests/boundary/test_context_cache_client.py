"""
Test suite for GeminiContextCacheClient.

The google-genai client is mocked; errors are real google.genai.errors types.

System role: Verification of context cache provider adapter
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import errors

from researchly.boundary.llm.context_cache_client import GeminiContextCacheClient, is_too_small_error
from researchly.core.exceptions import CacheTooSmallError, ProviderError


def client_error(code: int, message: str) -> errors.ClientError:
    return errors.ClientError(code, {"error": {"code": code, "message": message, "status": "INVALID_ARGUMENT"}})


@pytest.fixture
def genai_client() -> MagicMock:
    client = MagicMock()
    client.aio.caches.create = AsyncMock(return_value=SimpleNamespace(name="cachedContents/abc"))
    client.aio.caches.get = AsyncMock()
    client.aio.caches.delete = AsyncMock()
    return client


@pytest.fixture
def cache_client(genai_client) -> GeminiContextCacheClient:
    return GeminiContextCacheClient(genai_client, "gemini-2.5-flash")


class TestIsTooSmallError:
    def test_minimum_token_message_should_match(self) -> None:
        exc = client_error(400, "Cached content is too small. min_total_token_count is 1024")

        assert is_too_small_error(exc) is True

    def test_other_client_errors_should_not_match(self) -> None:
        assert is_too_small_error(client_error(400, "Invalid mime type")) is False

    def test_non_provider_errors_should_not_match(self) -> None:
        assert is_too_small_error(ValueError("too small")) is False


class TestCreate:
    async def test_create_should_send_document_and_ttl(self, cache_client, genai_client) -> None:
        # Act
        name = await cache_client.create("paper-1", "You are helpful", b"%PDF", ttl_seconds=3600)

        # Assert
        assert name == "cachedContents/abc"
        kwargs = genai_client.aio.caches.create.await_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        config = kwargs["config"]
        assert config.ttl == "3600s"
        assert config.display_name == "paper-1"
        assert config.contents[0].parts[0].inline_data.mime_type == "application/pdf"

    async def test_too_small_document_should_raise_cache_too_small(self, cache_client, genai_client) -> None:
        genai_client.aio.caches.create.side_effect = client_error(400, "min_total_token_count not reached")

        with pytest.raises(CacheTooSmallError):
            await cache_client.create("paper-1", "sys", b"%PDF", ttl_seconds=60)

    async def test_other_failures_should_raise_provider_error(self, cache_client, genai_client) -> None:
        genai_client.aio.caches.create.side_effect = errors.ServerError(
            503, {"error": {"code": 503, "message": "unavailable", "status": "UNAVAILABLE"}}
        )

        with pytest.raises(ProviderError) as exc_info:
            await cache_client.create("paper-1", "sys", b"%PDF", ttl_seconds=60)

        assert not isinstance(exc_info.value, CacheTooSmallError)


class TestIsLive:
    async def test_future_expiry_should_be_live(self, cache_client, genai_client) -> None:
        genai_client.aio.caches.get.return_value = SimpleNamespace(
            expire_time=datetime.now(timezone.utc) + timedelta(minutes=10)
        )

        assert await cache_client.is_live("cachedContents/abc") is True

    async def test_past_expiry_should_not_be_live(self, cache_client, genai_client) -> None:
        genai_client.aio.caches.get.return_value = SimpleNamespace(
            expire_time=datetime.now(timezone.utc) - timedelta(minutes=1)
        )

        assert await cache_client.is_live("cachedContents/abc") is False

    @pytest.mark.parametrize("code", [403, 404])
    async def test_missing_cache_should_not_be_live(self, cache_client, genai_client, code) -> None:
        genai_client.aio.caches.get.side_effect = client_error(code, "not found")

        assert await cache_client.is_live("cachedContents/abc") is False

    async def test_lookup_failure_should_raise(self, cache_client, genai_client) -> None:
        genai_client.aio.caches.get.side_effect = client_error(429, "quota")

        with pytest.raises(ProviderError):
            await cache_client.is_live("cachedContents/abc")


class TestDelete:
    async def test_delete_failure_should_raise_provider_error(self, cache_client, genai_client) -> None:
        genai_client.aio.caches.delete.side_effect = client_error(404, "not found")

        with pytest.raises(ProviderError):
            await cache_client.delete("cachedContents/abc")
