"""
Chat session domain models.

Immutable values for the per-(paper, user) conversational state. Services
fetch a ChatSession, derive a new value with model_copy(update=...), and
write it back explicitly.

Dependencies: pydantic
System role: Session value objects
"""

from datetime import datetime, timezone
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from storage."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class ChatMessage(BaseModel):
    """One conversational turn."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utc_now)


class CacheHandle(BaseModel):
    """
    Reference to a provider-side context cache.

    Attributes:
        name: Opaque provider resource name
        expires_at: Absolute expiry instant recorded at creation
    """

    model_config = ConfigDict(frozen=True)

    name: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Whether the recorded expiry is at or before now."""
        return ensure_utc(self.expires_at) <= now


class ChatSession(BaseModel):
    """
    Durable conversational and caching-strategy state for one paper and user.

    Attributes:
        id: Session identifier
        paper_id: Paper the conversation is about
        user_id: Owning user
        messages: Ordered history, oldest first
        is_indexed: Whether the paper is in the retrieval index
        cache_name: Active context cache name, if any
        cache_expires_at: Recorded expiry of the active context cache
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    paper_id: UUID
    user_id: str
    messages: tuple[ChatMessage, ...] = ()
    is_indexed: bool = False
    cache_name: str | None = None
    cache_expires_at: datetime | None = None

    @model_validator(mode="after")
    def _check_cache_fields(self) -> "ChatSession":
        if (self.cache_name is None) != (self.cache_expires_at is None):
            raise ValueError("cache_name and cache_expires_at must be set together")
        return self

    @property
    def cache_handle(self) -> CacheHandle | None:
        """The active cache handle, or None when no cache is recorded."""
        if self.cache_name is None or self.cache_expires_at is None:
            return None
        return CacheHandle(name=self.cache_name, expires_at=ensure_utc(self.cache_expires_at))

    def with_cache(self, handle: CacheHandle | None) -> "ChatSession":
        """Return a copy holding the given cache handle (or none)."""
        if handle is None:
            return self.model_copy(update={"cache_name": None, "cache_expires_at": None})
        return self.model_copy(
            update={"cache_name": handle.name, "cache_expires_at": handle.expires_at}
        )
