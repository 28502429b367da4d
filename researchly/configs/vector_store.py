"""
Vector store configuration settings.

Manages local FAISS persistence for per-paper retrieval namespaces.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for RAG retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (FAISS, one index per namespace)."""

    persist_directory: str = Field(
        default=".faiss_index",
        description="Root directory holding one FAISS index per namespace",
    )
    max_loaded_namespaces: int = Field(
        default=32,
        ge=1,
        description="Namespace indexes kept in memory before least recently used ones are evicted",
    )

    class Config:
        """Pydantic config."""

        env_prefix = "VECTOR_STORE_"
        case_sensitive = False
        extra = "ignore"
