"""
Context strategy configuration settings.

Selects how paper content reaches the model on chat turns (provider-side
context cache or retrieval index) and tunes both paths.

Dependencies: pydantic, pydantic_settings
System role: AI context strategy configuration
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from researchly.configs.base import BaseSettings


class ContextStrategySettings(BaseSettings):
    """Context cache and retrieval index tuning."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AI_",
        case_sensitive=False,
        extra="ignore",
    )

    strategy: Literal["cache", "retrieval"] = Field(
        default="cache",
        description="Active context strategy for chat: 'cache' or 'retrieval'",
    )
    cache_ttl_seconds: int = Field(default=3600, description="Context cache time-to-live", gt=0)
    chat_top_k: int = Field(default=5, description="Passages retrieved per chat turn", ge=1)
    define_top_k: int = Field(default=3, description="Passages retrieved per term definition", ge=1)
    chunk_size: int = Field(default=1000, description="Passage size in characters", gt=0)
    chunk_overlap: int = Field(default=200, description="Overlap between passages in characters", ge=0)
