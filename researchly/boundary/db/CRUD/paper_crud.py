"""
Paper CRUD operations.

Dependencies: sqlalchemy, researchly.boundary.db.models
System role: Paper read access and summary write-back
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from researchly.boundary.db.CRUD.base_crud import BaseCRUD
from researchly.boundary.db.models.paper_model import PaperModel


class PaperCRUD(BaseCRUD[PaperModel]):
    """CRUD operations for PaperModel."""

    def __init__(self) -> None:
        """Initialize PaperCRUD with PaperModel."""
        super().__init__(PaperModel)

    async def get_for_user(
        self,
        session: AsyncSession,
        paper_id: UUID,
        user_id: str,
    ) -> PaperModel | None:
        """
        Retrieve a paper only if it belongs to the given user.

        Args:
            session: Async database session
            paper_id: Paper UUID
            user_id: Requesting user

        Returns:
            PaperModel if it exists and is owned by user_id, None otherwise
        """
        stmt = select(PaperModel).where(
            PaperModel.id == paper_id,
            PaperModel.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_summary(self, session: AsyncSession, paper_id: UUID, summary: str) -> bool:
        """Overwrite a paper's summary."""
        return await self.update_by_id(session, paper_id, summary=summary)


paper_crud = PaperCRUD()
