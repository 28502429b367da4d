"""
Note CRUD operations.

Dependencies: sqlalchemy, researchly.boundary.db.models
System role: Per-paper note persistence operations
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from researchly.boundary.db.CRUD.base_crud import BaseCRUD
from researchly.boundary.db.models.note_model import NoteModel


class NoteCRUD(BaseCRUD[NoteModel]):
    """CRUD operations for NoteModel."""

    def __init__(self) -> None:
        """Initialize NoteCRUD with NoteModel."""
        super().__init__(NoteModel)

    async def get_by_paper_and_user(
        self,
        session: AsyncSession,
        paper_id: str,
        user_id: str,
    ) -> NoteModel | None:
        """
        Retrieve a user's note for a paper.

        Args:
            session: Async database session
            paper_id: Paper identifier as sent by the client
            user_id: Owning user

        Returns:
            NoteModel if present, None otherwise
        """
        stmt = select(NoteModel).where(
            NoteModel.paper_id == paper_id,
            NoteModel.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(
        self,
        session: AsyncSession,
        paper_id: str,
        user_id: str,
        content: str,
    ) -> NoteModel:
        """
        Create or overwrite a user's note for a paper.

        Args:
            session: Async database session
            paper_id: Paper identifier
            user_id: Owning user
            content: New note content

        Returns:
            The stored NoteModel
        """
        note = await self.get_by_paper_and_user(session, paper_id, user_id)
        if note is None:
            return await self.create(session, paper_id=paper_id, user_id=user_id, content=content)
        note.content = content
        await session.flush()
        return note


note_crud = NoteCRUD()
