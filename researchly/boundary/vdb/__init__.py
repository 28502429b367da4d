"""Vector index boundary: embeddings and per-namespace FAISS indexes."""

from researchly.boundary.vdb.embeddings import GeminiEmbeddings
from researchly.boundary.vdb.faiss_index import FAISSNamespaceIndex

__all__ = ["FAISSNamespaceIndex", "GeminiEmbeddings"]
