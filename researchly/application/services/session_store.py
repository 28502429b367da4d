"""
Chat session store.

Durable per-(paper, user) conversational state. Every call opens its own
database session from the injected factory, so concurrent operations on one
connection never share a transaction. Values in and out are immutable
ChatSession objects; callers derive a new value and write it back.

Dependencies: sqlalchemy, researchly.boundary.db
System role: Session persistence service
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from researchly.boundary.db.CRUD.chat_session_crud import chat_session_crud
from researchly.boundary.db.models.chat_session_model import ChatMessageModel, ChatSessionModel
from researchly.core.exceptions import StorageError
from researchly.models.session import ChatMessage, ChatSession, ensure_utc, utc_now

logger = logging.getLogger(__name__)


def _to_session(row: ChatSessionModel, messages: Sequence[ChatMessageModel]) -> ChatSession:
    return ChatSession(
        id=row.id,
        paper_id=row.paper_id,
        user_id=row.user_id,
        messages=tuple(
            ChatMessage(role=m.role, content=m.content, timestamp=ensure_utc(m.timestamp))
            for m in messages
        ),
        is_indexed=row.is_indexed,
        cache_name=row.cache_name,
        cache_expires_at=ensure_utc(row.cache_expires_at),
    )


class SessionStore:
    """Read, create, append to and clear chat sessions."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize store.

        Args:
            session_factory: Async session factory bound to the engine
            clock: Source of the current UTC time for message timestamps
        """
        self._session_factory = session_factory
        self._clock = clock

    async def get(self, paper_id: UUID, user_id: str) -> ChatSession | None:
        """
        Fetch the session for a paper and user without creating it.

        Raises:
            StorageError: If the database read fails
        """
        try:
            async with self._session_factory() as db:
                row = await chat_session_crud.get_by_paper_and_user(db, paper_id, user_id)
                if row is None:
                    return None
                messages = await chat_session_crud.list_messages(db, row.id)
                return _to_session(row, messages)
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:get - FAILED: {type(e).__name__}: {e}")
            raise StorageError("Failed to read chat session", operation="get") from e

    async def get_or_create(self, paper_id: UUID, user_id: str) -> ChatSession:
        """
        Return the existing session or create an empty one.

        Idempotent: a concurrent creator hitting the (paper, user) unique
        constraint re-reads the winner's row.

        Args:
            paper_id: Paper UUID
            user_id: Owning user

        Returns:
            ChatSession: Existing or newly created session

        Raises:
            StorageError: If the database operation fails
        """
        try:
            async with self._session_factory() as db, db.begin():
                row = await chat_session_crud.get_by_paper_and_user(db, paper_id, user_id)
                if row is not None:
                    messages = await chat_session_crud.list_messages(db, row.id)
                    return _to_session(row, messages)
                row = await chat_session_crud.create(
                    db,
                    paper_id=paper_id,
                    user_id=user_id,
                    is_indexed=False,
                    cache_name=None,
                    cache_expires_at=None,
                )
                created = _to_session(row, [])
            logger.info(
                f"{__name__}:get_or_create - Created session",
                extra={"paper_id": str(paper_id), "user_id": user_id},
            )
            return created
        except IntegrityError:
            logger.info(f"{__name__}:get_or_create - Lost creation race, re-reading")
            existing = await self.get(paper_id, user_id)
            if existing is None:
                raise StorageError("Failed to create chat session", operation="get_or_create")
            return existing
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:get_or_create - FAILED: {type(e).__name__}: {e}")
            raise StorageError("Failed to create chat session", operation="get_or_create") from e

    async def append_exchange(
        self,
        session: ChatSession,
        user_message: str,
        assistant_message: str,
    ) -> ChatSession:
        """
        Append a user message and its reply as one transaction.

        Both rows land or neither does. Concurrent appends to the same
        session each insert their own pair, so the history length stays even.

        Args:
            session: Session the exchange belongs to
            user_message: User's message
            assistant_message: Assistant's full reply

        Returns:
            ChatSession: session with the two new messages appended

        Raises:
            StorageError: If the session no longer exists or the write fails
        """
        user_turn = ChatMessage(role="user", content=user_message, timestamp=self._clock())
        assistant_turn = ChatMessage(role="assistant", content=assistant_message, timestamp=self._clock())
        try:
            async with self._session_factory() as db, db.begin():
                if await chat_session_crud.get_by_id(db, session.id) is None:
                    raise StorageError(
                        "Chat session no longer exists",
                        operation="append_exchange",
                        details={"session_id": str(session.id)},
                    )
                await chat_session_crud.add_messages(
                    db,
                    session.id,
                    [
                        (user_turn.role, user_turn.content, user_turn.timestamp),
                        (assistant_turn.role, assistant_turn.content, assistant_turn.timestamp),
                    ],
                )
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:append_exchange - FAILED: {type(e).__name__}: {e}")
            raise StorageError("Failed to save chat exchange", operation="append_exchange") from e

        logger.info(
            f"{__name__}:append_exchange - OK",
            extra={"session_id": str(session.id), "message_count": len(session.messages) + 2},
        )
        return session.model_copy(update={"messages": session.messages + (user_turn, assistant_turn)})

    async def save(self, session: ChatSession) -> ChatSession:
        """
        Write back a session's strategy markers (index flag and cache handle).

        Last write wins; messages are only ever written by append_exchange.

        Raises:
            StorageError: If the session no longer exists or the write fails
        """
        try:
            async with self._session_factory() as db, db.begin():
                updated = await chat_session_crud.update_by_id(
                    db,
                    session.id,
                    is_indexed=session.is_indexed,
                    cache_name=session.cache_name,
                    cache_expires_at=session.cache_expires_at,
                )
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:save - FAILED: {type(e).__name__}: {e}")
            raise StorageError("Failed to save chat session", operation="save") from e

        if not updated:
            raise StorageError(
                "Chat session no longer exists",
                operation="save",
                details={"session_id": str(session.id)},
            )
        return session

    async def clear(self, paper_id: UUID, user_id: str) -> bool:
        """
        Delete the session and all its messages.

        Returns:
            bool: True if a session existed

        Raises:
            StorageError: If the delete fails
        """
        try:
            async with self._session_factory() as db, db.begin():
                deleted = await chat_session_crud.delete_by_paper_and_user(db, paper_id, user_id)
        except SQLAlchemyError as e:
            logger.error(f"{__name__}:clear - FAILED: {type(e).__name__}: {e}")
            raise StorageError("Failed to clear chat session", operation="clear") from e

        logger.info(
            f"{__name__}:clear - deleted={deleted}",
            extra={"paper_id": str(paper_id), "user_id": user_id},
        )
        return deleted
