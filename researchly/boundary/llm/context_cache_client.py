"""
Gemini context cache client.

Thin async wrapper over google-genai's caches API: create a cache from a
PDF plus system instruction, check liveness, delete. Provider errors are
translated into the application taxonomy.

Dependencies: google.genai
System role: Context cache provider adapter
"""

import logging
from datetime import datetime, timezone

from google import genai
from google.genai import errors, types

from researchly.core.exceptions import CacheTooSmallError, ProviderError

logger = logging.getLogger(__name__)

_TOO_SMALL_MARKERS = ("min_total_token_count", "too small", "minimum")


def is_too_small_error(exc: Exception) -> bool:
    """Whether a provider error rejects content as below the cacheable minimum."""
    if not isinstance(exc, errors.ClientError):
        return False
    text = f"{getattr(exc, 'message', '') or ''} {exc}".lower()
    return any(marker in text for marker in _TOO_SMALL_MARKERS)


class GeminiContextCacheClient:
    """Create, inspect and delete Gemini cached contents."""

    def __init__(self, client: genai.Client, model_id: str) -> None:
        """
        Initialize cache client.

        Args:
            client: Shared google-genai client
            model_id: Model the caches are created for
        """
        self._client = client
        self._model_id = model_id

    async def create(
        self,
        display_name: str,
        system_instruction: str,
        document: bytes,
        ttl_seconds: int,
    ) -> str:
        """
        Create a cache holding the PDF and system instruction.

        Args:
            display_name: Human-readable cache label
            system_instruction: Fixed instruction stored with the cache
            document: PDF bytes
            ttl_seconds: Time-to-live

        Returns:
            str: Provider cache name

        Raises:
            CacheTooSmallError: If the document is below the minimum cacheable size
            ProviderError: On any other failure
        """
        logger.info(
            f"{__name__}:create - START display_name={display_name}",
            extra={"document_bytes": len(document), "ttl_seconds": ttl_seconds},
        )
        config = types.CreateCachedContentConfig(
            display_name=display_name,
            system_instruction=system_instruction,
            contents=[
                types.Content(
                    role="user",
                    parts=[types.Part.from_bytes(data=document, mime_type="application/pdf")],
                )
            ],
            ttl=f"{ttl_seconds}s",
        )
        try:
            cache = await self._client.aio.caches.create(model=self._model_id, config=config)
        except errors.APIError as e:
            if is_too_small_error(e):
                logger.info(f"{__name__}:create - Document below cacheable minimum")
                raise CacheTooSmallError(details={"error": str(e)}) from e
            logger.error(f"{__name__}:create - FAILED: {type(e).__name__}: {e}")
            raise ProviderError(
                "Context cache creation failed",
                provider="cache",
                details={"error": str(e)},
            ) from e

        if not cache.name:
            raise ProviderError("Context cache created without a name", provider="cache")
        logger.info(f"{__name__}:create - OK name={cache.name}")
        return cache.name

    async def is_live(self, name: str) -> bool:
        """
        Check whether a cache still exists and has not expired provider-side.

        Args:
            name: Provider cache name

        Returns:
            bool: True if the cache can be used

        Raises:
            ProviderError: If the check itself fails for reasons other than absence
        """
        try:
            cache = await self._client.aio.caches.get(name=name)
        except errors.ClientError as e:
            if e.code in (403, 404):
                logger.info(f"{__name__}:is_live - Cache gone name={name}, code={e.code}")
                return False
            raise ProviderError(
                "Context cache lookup failed",
                provider="cache",
                details={"cache_name": name, "error": str(e)},
            ) from e
        except errors.APIError as e:
            raise ProviderError(
                "Context cache lookup failed",
                provider="cache",
                details={"cache_name": name, "error": str(e)},
            ) from e

        expire_time = cache.expire_time
        if expire_time is None:
            return True
        if expire_time.tzinfo is None:
            expire_time = expire_time.replace(tzinfo=timezone.utc)
        return expire_time > datetime.now(timezone.utc)

    async def delete(self, name: str) -> None:
        """
        Delete a cache.

        Raises:
            ProviderError: If the provider rejects the deletion
        """
        try:
            await self._client.aio.caches.delete(name=name)
        except errors.APIError as e:
            raise ProviderError(
                "Context cache deletion failed",
                provider="cache",
                details={"cache_name": name, "error": str(e)},
            ) from e
        logger.info(f"{__name__}:delete - OK name={name}")
