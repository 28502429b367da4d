"""
Gemini embeddings with a fixed output dimensionality.

GoogleGenerativeAIEmbeddings does not apply output_dimensionality from its
constructor, so every embed call passes it explicitly. All vectors in a
FAISS namespace must share one dimension.

Dependencies: langchain_google_genai
System role: Embedding model for the retrieval index
"""

import logging

from langchain_google_genai import GoogleGenerativeAIEmbeddings

logger = logging.getLogger(__name__)


class GeminiEmbeddings(GoogleGenerativeAIEmbeddings):
    """GoogleGenerativeAIEmbeddings pinned to one output dimension."""

    _output_dimensionality: int = 768

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 768,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings.

        Args:
            model: Gemini embedding model ID
            output_dimensionality: Dimension applied to every call
            **kwargs: Passed to GoogleGenerativeAIEmbeddings (e.g. google_api_key)
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(f"{__name__}:__init__ - model={model}, dimension={output_dimensionality}")

    def embed_documents(self, texts: list[str], **kwargs) -> list[list[float]]:
        kwargs.setdefault("output_dimensionality", self._output_dimensionality)
        return super().embed_documents(texts, **kwargs)

    def embed_query(self, text: str, **kwargs) -> list[float]:
        kwargs.setdefault("output_dimensionality", self._output_dimensionality)
        return super().embed_query(text, **kwargs)
