"""
Generic primary-key CRUD for ORM models.

Methods take the caller's AsyncSession and never commit: services own the
transaction (`async with factory() as db, db.begin():`) so several CRUD
calls can land atomically.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from researchly.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """Insert, fetch, update and delete rows of one model by primary key."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **values: Any) -> ModelT:
        """
        Insert a row and flush it so generated keys and defaults are populated.

        Raises:
            IntegrityError: If a unique or foreign key constraint is violated
        """
        instance = self.model(**values)
        session.add(instance)
        await session.flush()
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update_by_id(self, session: AsyncSession, id: UUID, **values: Any) -> bool:
        """
        Issue a bulk UPDATE for one row.

        Loaded instances are not synchronised; callers re-read if they need
        the new values.

        Returns:
            bool: False when no row has that key
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def delete_by_id(self, session: AsyncSession, id: UUID) -> bool:
        """Delete one row; False when no row has that key."""
        result = await session.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0
