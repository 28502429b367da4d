"""
PDF text extraction using LangChain PyPDFLoader.

PyPDFLoader reads from a path, so the bytes go through a temp file.

Dependencies: langchain_community.document_loaders, pypdf
System role: Text extraction for direct prompts and retrieval indexing
"""

import logging
import os
import tempfile

from fastapi.concurrency import run_in_threadpool
from langchain_community.document_loaders import PyPDFLoader

from researchly.core.exceptions import PreconditionFailedError

logger = logging.getLogger(__name__)


class PdfTextExtractor:
    """Extract plain text from PDF bytes."""

    def _extract_sync(self, document: bytes) -> str:
        fd, path = tempfile.mkstemp(suffix=".pdf", prefix="researchly_")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(document)
            pages = PyPDFLoader(path).load()
            return "\n\n".join(page.page_content for page in pages).strip()
        finally:
            os.unlink(path)

    async def extract(self, document: bytes) -> str:
        """
        Extract text from a PDF.

        Args:
            document: PDF bytes

        Returns:
            str: Page texts joined by blank lines

        Raises:
            PreconditionFailedError: If the PDF cannot be parsed
        """
        try:
            text = await run_in_threadpool(self._extract_sync, document)
        except Exception as e:
            logger.error(f"{__name__}:extract - FAILED: {type(e).__name__}: {e}")
            raise PreconditionFailedError(
                "Failed to extract text from PDF",
                details={"error": str(e)},
            ) from e
        logger.info(f"{__name__}:extract - OK chars={len(text)}")
        return text
