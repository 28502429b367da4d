"""
Retrieval index service.

Splits paper text into overlapping passages, stores them in a per-paper
namespace of the vector index and answers top-k similarity queries.
Indexing happens lazily, at most once per session, guarded by is_indexed.

Dependencies: langchain_text_splitters, researchly.boundary.vdb
System role: Retrieval-augmented context for chat and definitions
"""

import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from langchain_text_splitters import RecursiveCharacterTextSplitter

from researchly.application.services.session_store import SessionStore
from researchly.boundary.vdb.faiss_index import FAISSNamespaceIndex
from researchly.models.session import ChatSession

logger = logging.getLogger(__name__)


def namespace_for(paper_id: UUID | str) -> str:
    """Vector index namespace holding a paper's passages."""
    return f"paper_{paper_id}"


class RetrievalIndexService:
    """Lazy per-paper indexing and passage retrieval."""

    def __init__(
        self,
        index: FAISSNamespaceIndex,
        store: SessionStore,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
    ) -> None:
        """
        Initialize service.

        Args:
            index: Namespace vector index
            store: Session store used to persist the is_indexed flag
            chunk_size: Passage size in characters
            chunk_overlap: Overlap between consecutive passages
        """
        self._index = index
        self._store = store
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            length_function=len,
        )

    def split(self, text: str) -> list[str]:
        """Split text into overlapping passages."""
        return self._splitter.split_text(text)

    async def ensure_indexed(
        self,
        session: ChatSession,
        load_text: Callable[[], Awaitable[str]],
    ) -> ChatSession:
        """
        Index the session's paper unless it is already indexed.

        Args:
            session: Current session value
            load_text: Loads the paper text; only awaited when indexing is needed

        Returns:
            ChatSession: session with is_indexed set when passages were stored

        Raises:
            VectorStoreError: If embedding or storage fails
            StorageError: If the flag cannot be persisted
        """
        if session.is_indexed:
            return session

        text = await load_text()
        passages = await run_in_threadpool(self.split, text)
        count = await self._index.upsert(namespace_for(session.paper_id), passages)
        if count == 0:
            logger.warning(
                f"{__name__}:ensure_indexed - No passages to index",
                extra={"paper_id": str(session.paper_id)},
            )
            return session

        logger.info(
            f"{__name__}:ensure_indexed - Indexed passages={count}",
            extra={"paper_id": str(session.paper_id)},
        )
        return await self._store.save(session.model_copy(update={"is_indexed": True}))

    async def query(self, paper_id: UUID | str, text: str, k: int) -> list[str]:
        """
        Return the k passages most similar to text.

        Raises:
            VectorStoreError: If the search fails
        """
        passages = await self._index.query(namespace_for(paper_id), text, k)
        logger.info(f"{__name__}:query - Retrieved passages={len(passages)}, k={k}")
        return passages

    async def delete(self, paper_id: UUID | str) -> None:
        """Drop a paper's namespace, best-effort."""
        try:
            await self._index.delete_namespace(namespace_for(paper_id))
        except Exception as e:
            logger.warning(
                f"{__name__}:delete - Ignoring failure paper_id={paper_id}: {type(e).__name__}: {e}"
            )
