"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from researchly.configs.auth import AuthSettings
from researchly.configs.base import BaseSettings
from researchly.configs.context_strategy import ContextStrategySettings
from researchly.configs.database import DatabaseSettings
from researchly.configs.documents import DocumentStorageSettings
from researchly.configs.gemini import GeminiSettings
from researchly.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    gemini: GeminiSettings = GeminiSettings()
    context: ContextStrategySettings = ContextStrategySettings()
    vector_store: VectorStoreSettings = VectorStoreSettings()
    auth: AuthSettings = AuthSettings()
    documents: DocumentStorageSettings = DocumentStorageSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from researchly.configs import get_settings
        settings = get_settings()
    """
    return Settings()
