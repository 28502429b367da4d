"""
Paper service.

Resolves papers for the requesting user and loads their document bytes and
text. Absent papers, papers owned by someone else and malformed ids all
raise the same NotFoundError.

Dependencies: sqlalchemy, researchly.boundary.db, researchly.boundary.storage
System role: Paper access for AI operations
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from researchly.boundary.db.CRUD.paper_crud import paper_crud
from researchly.boundary.storage.document_fetcher import DocumentFetcher
from researchly.boundary.storage.pdf_text import PdfTextExtractor
from researchly.core.exceptions import NotFoundError, PreconditionFailedError, StorageError
from researchly.models.paper import PaperRecord

logger = logging.getLogger(__name__)

NO_DOCUMENT_MESSAGE = "Paper has no PDF file"


def parse_paper_id(paper_id: str) -> UUID:
    """
    Parse a client-supplied paper id.

    Raises:
        NotFoundError: If the id is not a valid UUID
    """
    try:
        return UUID(str(paper_id))
    except ValueError as e:
        raise NotFoundError(resource_id=str(paper_id)) from e


class PaperService:
    """Read access to papers and their documents."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        fetcher: DocumentFetcher,
        extractor: PdfTextExtractor,
    ) -> None:
        self._session_factory = session_factory
        self._fetcher = fetcher
        self._extractor = extractor

    async def resolve(self, paper_id: str, user_id: str) -> PaperRecord:
        """
        Load a paper owned by user_id that has a document.

        Args:
            paper_id: Client-supplied paper id
            user_id: Authenticated user

        Returns:
            PaperRecord: The paper

        Raises:
            NotFoundError: If absent, not owned by user_id, or malformed id
            PreconditionFailedError: If the paper has no document reference
            StorageError: If the database read fails
        """
        paper_uuid = parse_paper_id(paper_id)
        try:
            async with self._session_factory() as db:
                row = await paper_crud.get_for_user(db, paper_uuid, user_id)
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:resolve - FAILED: {type(e).__name__}: {e}")
            raise StorageError("Failed to load paper", operation="resolve") from e

        if row is None:
            raise NotFoundError(resource_id=str(paper_uuid))

        document_ref = row.file_url or row.storage_path or None
        if not document_ref:
            raise PreconditionFailedError(NO_DOCUMENT_MESSAGE, details={"paper_id": str(paper_uuid)})

        return PaperRecord(
            id=row.id,
            user_id=row.user_id,
            title=row.title,
            document_ref=document_ref,
            summary=row.summary,
        )

    async def load_document(self, paper: PaperRecord) -> bytes:
        """
        Fetch the paper's PDF bytes.

        Raises:
            PreconditionFailedError: If the document is missing or empty
            ProviderError: If retrieval fails
        """
        if not paper.document_ref:
            raise PreconditionFailedError(NO_DOCUMENT_MESSAGE)
        document = await self._fetcher.fetch(paper.document_ref)
        if not document:
            raise PreconditionFailedError(NO_DOCUMENT_MESSAGE, details={"paper_id": str(paper.id)})
        return document

    async def load_text(self, paper: PaperRecord) -> str:
        """
        Fetch the paper and extract its text.

        Raises:
            PreconditionFailedError: If there is no extractable text
            ProviderError: If retrieval fails
        """
        return await self.extract_text(paper, await self.load_document(paper))

    async def extract_text(self, paper: PaperRecord, document: bytes) -> str:
        """
        Extract text from already fetched PDF bytes.

        Raises:
            PreconditionFailedError: If there is no extractable text
        """
        text = await self._extractor.extract(document)
        if not text:
            raise PreconditionFailedError(
                "Paper has no extractable text",
                details={"paper_id": str(paper.id)},
            )
        return text

    async def save_summary(self, paper_id: UUID, summary: str) -> None:
        """
        Overwrite the paper's summary.

        Raises:
            StorageError: If the write fails
        """
        try:
            async with self._session_factory() as db, db.begin():
                updated = await paper_crud.update_summary(db, paper_id, summary)
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:save_summary - FAILED: {type(e).__name__}: {e}")
            raise StorageError("Failed to save summary", operation="save_summary") from e
        if not updated:
            raise StorageError("Paper no longer exists", operation="save_summary")
        logger.info(f"{__name__}:save_summary - OK paper_id={paper_id}, chars={len(summary)}")
