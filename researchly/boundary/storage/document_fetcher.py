"""
Paper document fetcher.

Resolves a paper's document reference to PDF bytes. Supports http(s) URLs
(httpx, retried on transient failures) and s3://bucket/key references
(boto3, run in the threadpool).

Dependencies: httpx, tenacity, boto3, fastapi
System role: Document retrieval for AI operations
"""

import logging
from urllib.parse import urlparse

import boto3
import httpx
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from researchly.configs.documents import DocumentStorageSettings
from researchly.core.exceptions import PreconditionFailedError, ProviderError

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    """Transport failures and 5xx responses are worth retrying."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


class DocumentFetcher:
    """Fetch PDF bytes for a document reference."""

    def __init__(
        self,
        settings: DocumentStorageSettings,
        http_client: httpx.AsyncClient | None = None,
        s3_client=None,
    ) -> None:
        """
        Initialize fetcher.

        Args:
            settings: Document storage settings
            http_client: Shared async HTTP client (created if None)
            s3_client: boto3 S3 client (created lazily on first s3:// fetch)
        """
        self._settings = settings
        self._http = http_client or httpx.AsyncClient(
            timeout=settings.fetch_timeout_seconds,
            follow_redirects=True,
        )
        self._s3_client = s3_client

    async def fetch(self, document_ref: str) -> bytes:
        """
        Download the document behind a reference.

        Args:
            document_ref: http(s) URL or s3://bucket/key

        Returns:
            bytes: Document content

        Raises:
            PreconditionFailedError: If the document does not exist
            ProviderError: If retrieval fails or the reference scheme is unsupported
        """
        scheme = urlparse(document_ref).scheme.lower()
        if scheme in ("http", "https"):
            return await self._fetch_http(document_ref)
        if scheme == "s3":
            return await self._fetch_s3(document_ref)
        raise ProviderError(
            "Unsupported document reference",
            provider="documents",
            details={"scheme": scheme or "<none>"},
        )

    async def _fetch_http(self, url: str) -> bytes:
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception(_is_transient),
                stop=stop_after_attempt(self._settings.fetch_retries),
                wait=wait_exponential_jitter(initial=0.5, max=5),
                before_sleep=lambda retry_state: logger.warning(
                    f"{__name__}:fetch - Retry {retry_state.attempt_number}/"
                    f"{self._settings.fetch_retries} after transient failure"
                ),
                reraise=True,
            ):
                with attempt:
                    response = await self._http.get(url)
                    response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise PreconditionFailedError("Paper has no PDF file") from e
            raise ProviderError(
                "Failed to fetch document",
                provider="documents",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                "Failed to fetch document",
                provider="documents",
                details={"error": str(e)},
            ) from e

        logger.info(f"{__name__}:fetch - OK bytes={len(response.content)}")
        return response.content

    def _get_s3_object(self, bucket: str, key: str) -> bytes:
        if self._s3_client is None:
            self._s3_client = boto3.client("s3", region_name=self._settings.region)
        response = self._s3_client.get_object(Bucket=bucket, Key=key)
        return response["Body"].read()

    async def _fetch_s3(self, document_ref: str) -> bytes:
        parsed = urlparse(document_ref)
        bucket, key = parsed.netloc, parsed.path.lstrip("/")
        if not bucket or not key:
            raise ProviderError("Invalid S3 document reference", provider="documents")
        try:
            data = await run_in_threadpool(self._get_s3_object, bucket, key)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise PreconditionFailedError("Paper has no PDF file") from e
            raise ProviderError(
                "Failed to fetch document",
                provider="documents",
                details={"error_code": error_code},
            ) from e
        except BotoCoreError as e:
            raise ProviderError(
                "Failed to fetch document",
                provider="documents",
                details={"error": str(e)},
            ) from e

        logger.info(f"{__name__}:fetch - OK s3 key={key}, bytes={len(data)}")
        return data

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
