"""
SQLAlchemy declarative base and shared column mixins.

Aware datetimes map to timezone-aware columns and UUIDs to the portable
Uuid type (native on PostgreSQL, CHAR(32) on SQLite), so models declare
plain Mapped[datetime] / Mapped[uuid.UUID] annotations. Constraint names
follow a fixed convention so they are stable across databases.

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, MetaData, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from researchly.models.session import utc_now

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base; every ORM model registers on its metadata."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
    type_annotation_map = {
        datetime: DateTime(timezone=True),
        uuid.UUID: Uuid(as_uuid=True),
    }


class UUIDMixin:
    """UUID v4 primary key generated client-side on insert."""

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """
    Row creation and modification times (UTC).

    updated_at is refreshed by the ORM on every UPDATE issued through a
    mapped instance.
    """

    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
