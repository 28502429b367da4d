"""
Note ORM model.

Dependencies: sqlalchemy, researchly.boundary.db.base
System role: Per-paper note persistence
"""

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from researchly.boundary.db.base import Base, TimestampMixin, UUIDMixin


class NoteModel(Base, UUIDMixin, TimestampMixin):
    """A user's notes for one paper."""

    __tablename__ = "notes"
    __table_args__ = (
        UniqueConstraint("user_id", "paper_id", name="uq_notes_user_paper"),
    )

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    paper_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
