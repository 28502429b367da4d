"""
Paper ORM model.

Papers are written by the upload subsystem; the AI layer reads them and
writes back the generated summary.

Dependencies: sqlalchemy, researchly.boundary.db.base
System role: Paper persistence
"""

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from researchly.boundary.db.base import Base, TimestampMixin, UUIDMixin
from researchly.models.session import utc_now


class PaperModel(Base, UUIDMixin, TimestampMixin):
    """Uploaded research paper."""

    __tablename__ = "papers"

    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    file_name: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    storage_path: Mapped[str] = mapped_column(Text, nullable=False, default="")
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(nullable=False, default=utc_now)
