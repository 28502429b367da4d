"""
Per-namespace FAISS vector index.

Each namespace (one per paper) is a separate LangChain FAISS index persisted
under persist_directory/<namespace>. FAISS and the embedding calls are
blocking, so every operation runs in the threadpool.

Dependencies: langchain_community.vectorstores, langchain_core, fastapi, cachetools
System role: Vector index provider for retrieval-augmented answers
"""

import logging
import re
import shutil
import threading
from pathlib import Path

from cachetools import LRUCache
from fastapi.concurrency import run_in_threadpool
from langchain_community.vectorstores import FAISS
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from researchly.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)

_SAFE_NAMESPACE = re.compile(r"^[A-Za-z0-9_\-]+$")


class FAISSNamespaceIndex:
    """
    Local FAISS indexes keyed by namespace.

    The most recently used indexes stay loaded; older ones are evicted and
    reloaded from disk on demand. Writes are saved to disk immediately.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        persist_directory: str = ".faiss_index",
        max_loaded: int = 32,
    ) -> None:
        """
        Initialize namespace index.

        Args:
            embeddings: Embedding model shared by all namespaces
            persist_directory: Root directory for namespace indexes
            max_loaded: Maximum number of indexes held in memory
        """
        self._embeddings = embeddings
        self._persist_dir = Path(persist_directory)
        self._indexes: LRUCache = LRUCache(maxsize=max_loaded)
        self._indexes_lock = threading.Lock()

    def _path(self, namespace: str) -> Path:
        if not _SAFE_NAMESPACE.match(namespace):
            raise VectorStoreError(f"Invalid namespace: {namespace!r}", operation="resolve")
        return self._persist_dir / namespace

    def _load(self, namespace: str) -> FAISS | None:
        with self._indexes_lock:
            index = self._indexes.get(namespace)
        if index is not None:
            return index
        path = self._path(namespace)
        if not (path / "index.faiss").exists():
            return None
        index = FAISS.load_local(
            str(path),
            self._embeddings,
            allow_dangerous_deserialization=True,
        )
        with self._indexes_lock:
            self._indexes[namespace] = index
        return index

    def _upsert_sync(self, namespace: str, passages: list[str]) -> int:
        path = self._path(namespace)
        documents = [
            Document(page_content=text, metadata={"namespace": namespace, "chunk_index": i})
            for i, text in enumerate(passages)
        ]
        # A fresh index replaces whatever the namespace held before
        index = FAISS.from_documents(documents, self._embeddings)
        path.mkdir(parents=True, exist_ok=True)
        index.save_local(str(path))
        with self._indexes_lock:
            self._indexes[namespace] = index
        return len(documents)

    def _query_sync(self, namespace: str, text: str, k: int) -> list[str]:
        index = self._load(namespace)
        if index is None:
            return []
        return [doc.page_content for doc in index.similarity_search(text, k=k)]

    def _delete_sync(self, namespace: str) -> None:
        with self._indexes_lock:
            self._indexes.pop(namespace, None)
        path = self._path(namespace)
        if path.exists():
            shutil.rmtree(path)

    async def upsert(self, namespace: str, passages: list[str]) -> int:
        """
        Embed passages and store them as the namespace's entire contents.

        Args:
            namespace: Target namespace
            passages: Passage texts

        Returns:
            int: Number of passages stored

        Raises:
            VectorStoreError: If embedding or persistence fails
        """
        if not passages:
            return 0
        try:
            count = await run_in_threadpool(self._upsert_sync, namespace, passages)
        except VectorStoreError:
            raise
        except Exception as e:
            logger.error(f"{__name__}:upsert - FAILED namespace={namespace}: {type(e).__name__}: {e}")
            raise VectorStoreError(
                "Failed to index passages",
                operation="upsert",
                details={"namespace": namespace, "error": str(e)},
            ) from e
        logger.info(f"{__name__}:upsert - OK namespace={namespace}, passages={count}")
        return count

    async def query(self, namespace: str, text: str, k: int) -> list[str]:
        """
        Return the k passages most similar to text.

        Args:
            namespace: Namespace to search
            text: Query text
            k: Number of passages

        Returns:
            list[str]: Passage texts, most similar first; empty when the namespace is absent

        Raises:
            VectorStoreError: If the search fails
        """
        try:
            return await run_in_threadpool(self._query_sync, namespace, text, k)
        except VectorStoreError:
            raise
        except Exception as e:
            logger.error(f"{__name__}:query - FAILED namespace={namespace}: {type(e).__name__}: {e}")
            raise VectorStoreError(
                "Failed to query passages",
                operation="query",
                details={"namespace": namespace, "error": str(e)},
            ) from e

    async def delete_namespace(self, namespace: str) -> None:
        """
        Remove a namespace and its persisted files.

        Raises:
            VectorStoreError: If removal fails
        """
        try:
            await run_in_threadpool(self._delete_sync, namespace)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(
                "Failed to delete namespace",
                operation="delete",
                details={"namespace": namespace, "error": str(e)},
            ) from e
        logger.info(f"{__name__}:delete_namespace - OK namespace={namespace}")
