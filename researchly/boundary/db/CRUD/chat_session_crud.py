"""
Chat session CRUD operations.

Lookups by the (paper, user) natural key, exchange inserts and the
explicit delete used by clear-history.

Dependencies: sqlalchemy, researchly.boundary.db.models
System role: Chat session persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from researchly.boundary.db.CRUD.base_crud import BaseCRUD
from researchly.boundary.db.models.chat_session_model import ChatMessageModel, ChatSessionModel


class ChatSessionCRUD(BaseCRUD[ChatSessionModel]):
    """CRUD operations for ChatSessionModel and its messages."""

    def __init__(self) -> None:
        """Initialize ChatSessionCRUD with ChatSessionModel."""
        super().__init__(ChatSessionModel)

    async def get_by_paper_and_user(
        self,
        session: AsyncSession,
        paper_id: UUID,
        user_id: str,
    ) -> ChatSessionModel | None:
        """
        Retrieve the session for one paper and user.

        Args:
            session: Async database session
            paper_id: Paper UUID
            user_id: Owning user

        Returns:
            ChatSessionModel if present, None otherwise
        """
        stmt = select(ChatSessionModel).where(
            ChatSessionModel.paper_id == paper_id,
            ChatSessionModel.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_messages(
        self,
        session: AsyncSession,
        session_id: UUID,
    ) -> Sequence[ChatMessageModel]:
        """
        Retrieve a session's messages in conversational order.

        Args:
            session: Async database session
            session_id: Chat session UUID

        Returns:
            Messages ordered oldest first
        """
        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.session_id == session_id)
            .order_by(ChatMessageModel.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def add_messages(
        self,
        session: AsyncSession,
        session_id: UUID,
        messages: list[tuple[str, str, datetime]],
    ) -> None:
        """
        Insert messages in order within the caller's transaction.

        Args:
            session: Async database session
            session_id: Chat session UUID
            messages: (role, content, timestamp) triples, oldest first
        """
        for role, content, timestamp in messages:
            session.add(
                ChatMessageModel(
                    session_id=session_id,
                    role=role,
                    content=content,
                    timestamp=timestamp,
                )
            )
            # Flush per row so autoincrement ids follow list order
            await session.flush()

    async def delete_by_paper_and_user(
        self,
        session: AsyncSession,
        paper_id: UUID,
        user_id: str,
    ) -> bool:
        """
        Delete the session and its messages for one paper and user.

        Args:
            session: Async database session
            paper_id: Paper UUID
            user_id: Owning user

        Returns:
            True if a session was deleted, False if none existed
        """
        row = await self.get_by_paper_and_user(session, paper_id, user_id)
        if row is None:
            return False
        await session.execute(
            delete(ChatMessageModel).where(ChatMessageModel.session_id == row.id)
        )
        return await self.delete_by_id(session, row.id)


chat_session_crud = ChatSessionCRUD()
