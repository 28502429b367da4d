"""
Context cache manager.

Keeps one provider-side context cache per chat session so chat turns don't
re-send the whole paper. A locally valid handle is still confirmed with the
provider before reuse; an expired one is replaced without asking. Undersized
documents degrade to no caching (ensure returns None).

Dependencies: researchly.boundary.llm, researchly.application.services.session_store
System role: Context cache lifecycle management
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from researchly.application.prompts import chat_system_instruction
from researchly.application.services.session_store import SessionStore
from researchly.boundary.llm.context_cache_client import GeminiContextCacheClient
from researchly.core.exceptions import CacheTooSmallError, ProviderError
from researchly.models.session import CacheHandle, ChatSession, utc_now

logger = logging.getLogger(__name__)


class ContextCacheManager:
    """Create, reuse and invalidate context caches for chat sessions."""

    def __init__(
        self,
        client: GeminiContextCacheClient,
        store: SessionStore,
        ttl_seconds: int = 3600,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize manager.

        Args:
            client: Context cache provider client
            store: Session store used to persist handle changes
            ttl_seconds: Time-to-live for new caches
            clock: Source of the current UTC time
        """
        self._client = client
        self._store = store
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    async def _confirm(self, handle: CacheHandle) -> bool | None:
        """Ask the provider whether the cache is live; None when the lookup itself failed."""
        try:
            return await self._client.is_live(handle.name)
        except ProviderError as e:
            logger.warning(f"{__name__}:ensure - Revalidation failed name={handle.name}: {e.message}")
            return None

    async def ensure(
        self,
        session: ChatSession,
        paper_title: str,
        load_document: Callable[[], Awaitable[bytes]],
    ) -> CacheHandle | None:
        """
        Return a usable cache handle for the session, creating one if needed.

        Args:
            session: Current session value
            paper_title: Title written into the cached system instruction
            load_document: Loads the PDF bytes; only awaited when a cache must be created

        Returns:
            CacheHandle | None: Live handle, or None when the document is too
            small to cache and the caller should proceed without caching

        Raises:
            ProviderError: If cache creation fails for any other reason
            StorageError: If the handle cannot be persisted
            PreconditionFailedError: If the document cannot be loaded
        """
        handle = session.cache_handle
        if handle is not None:
            if handle.is_expired(self._clock()):
                logger.info(f"{__name__}:ensure - Local expiry passed name={handle.name}")
                await self.invalidate(handle)
            else:
                live = await self._confirm(handle)
                if live:
                    logger.info(f"{__name__}:ensure - Reusing cache name={handle.name}")
                    return handle
                if live is None:
                    # Lookup failed, so the remote cache may still exist
                    await self.invalidate(handle)
                else:
                    logger.info(f"{__name__}:ensure - Cache no longer live name={handle.name}")
            session = await self._store.save(session.with_cache(None))

        document = await load_document()
        created_at = self._clock()
        try:
            name = await self._client.create(
                display_name=f"paper-{session.paper_id}",
                system_instruction=chat_system_instruction(paper_title),
                document=document,
                ttl_seconds=int(self._ttl.total_seconds()),
            )
        except CacheTooSmallError:
            logger.info(
                f"{__name__}:ensure - Document too small to cache, continuing without",
                extra={"paper_id": str(session.paper_id)},
            )
            return None

        handle = CacheHandle(name=name, expires_at=created_at + self._ttl)
        await self._store.save(session.with_cache(handle))
        logger.info(
            f"{__name__}:ensure - Created cache name={name}",
            extra={"paper_id": str(session.paper_id), "expires_at": handle.expires_at.isoformat()},
        )
        return handle

    async def invalidate(self, handle: CacheHandle | None) -> None:
        """
        Delete a cache provider-side, best-effort.

        Failures (including already expired or deleted caches) are logged and
        never raised.
        """
        if handle is None:
            return
        try:
            await self._client.delete(handle.name)
        except Exception as e:
            logger.warning(
                f"{__name__}:invalidate - Ignoring failure name={handle.name}: {type(e).__name__}: {e}"
            )
