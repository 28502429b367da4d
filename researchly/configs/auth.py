"""
Authentication configuration settings.

Secret and algorithm used to verify bearer tokens presented on the realtime
connection handshake.

Dependencies: pydantic, pydantic_settings
System role: Credential verification configuration
"""

from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

from researchly.configs.base import BaseSettings


class AuthSettings(BaseSettings):
    """JWT verification settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUTH_",
        case_sensitive=False,
        extra="ignore",
    )

    jwt_secret: SecretStr = Field(
        default=SecretStr("your-secret-key-change-in-production"),
        description="HMAC secret shared with the token issuer",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
