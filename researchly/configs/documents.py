"""
Document storage configuration.

Settings for fetching uploaded paper PDFs from object storage or URLs.

Dependencies: pydantic_settings
System role: Document retrieval configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocumentStorageSettings(BaseSettings):
    """Settings for fetching stored paper documents."""

    model_config = SettingsConfigDict(
        env_prefix="DOCUMENTS_",
        case_sensitive=False,
        extra="ignore",
    )

    region: str = Field(
        default="us-east-1",
        description="AWS region for s3:// document references",
    )
    fetch_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout for URL document references",
    )
    fetch_retries: int = Field(
        default=3,
        description="Attempts for transient document fetch failures",
        ge=1,
    )
