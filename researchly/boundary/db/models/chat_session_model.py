"""
Chat session ORM models.

One chat_sessions row per (paper, user) holds the caching-strategy markers;
chat_messages rows hold the ordered conversation. Message order is the
autoincrement primary key, so an exchange inserted in one transaction keeps
its user/assistant order.

Dependencies: sqlalchemy, researchly.boundary.db.base
System role: Session persistence for conversational context
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from researchly.boundary.db.base import Base, TimestampMixin, UUIDMixin
from researchly.models.session import utc_now


class ChatSessionModel(Base, UUIDMixin, TimestampMixin):
    """
    Chat session ORM model.

    Attributes:
        paper_id: Paper the conversation belongs to
        user_id: Owning user
        is_indexed: Retrieval index marker
        cache_name: Active context cache name (nullable)
        cache_expires_at: Recorded cache expiry (nullable, set with cache_name)
    """

    __tablename__ = "chat_sessions"
    __table_args__ = (
        UniqueConstraint("paper_id", "user_id", name="uq_chat_sessions_paper_user"),
    )

    paper_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    is_indexed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cache_name: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)
    cache_expires_at: Mapped[datetime | None] = mapped_column(nullable=True, default=None)


class ChatMessageModel(Base):
    """
    Chat message ORM model.

    Attributes:
        id: Autoincrement key, defines conversational order
        session_id: Owning chat session
        role: "user" or "assistant"
        content: Message text
        timestamp: When the message was recorded (UTC)
    """

    __tablename__ = "chat_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[UUID] = mapped_column(
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(nullable=False, default=utc_now)
