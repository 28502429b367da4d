"""Gemini language model and context cache clients."""

from researchly.boundary.llm.context_cache_client import GeminiContextCacheClient
from researchly.boundary.llm.gemini_client import GeminiChatClient, extract_chunk_text

__all__ = ["GeminiChatClient", "GeminiContextCacheClient", "extract_chunk_text"]
