"""
Gemini provider configuration settings.

Model, sampling and embedding settings for the Google Gemini APIs used for
generation, context caching and retrieval embeddings.

Dependencies: pydantic, pydantic_settings
System role: Language model provider configuration
"""

from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

from researchly.configs.base import BaseSettings


class GeminiSettings(BaseSettings):
    """Google Gemini configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GEMINI_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: SecretStr = Field(default=SecretStr(""), description="Google AI Studio API key")
    model_id: str = Field(
        default="gemini-2.5-flash",
        description="Generation model; must support explicit context caching",
    )
    temperature: float = Field(default=0.3, description="Sampling temperature for summary and chat")
    define_temperature: float = Field(
        default=0.2,
        description="Sampling temperature for term definitions",
    )
    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Embedding model for the retrieval index",
    )
    embedding_dimension: int = Field(
        default=768,
        description="Output dimensionality requested from the embedding model",
    )
