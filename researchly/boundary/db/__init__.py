"""
Database boundary: declarative base, engine factories, ORM models and CRUD.
"""

from researchly.boundary.db.base import Base
from researchly.boundary.db.connection import create_tables, get_async_engine, get_async_session_factory

__all__ = ["Base", "create_tables", "get_async_engine", "get_async_session_factory"]
