"""
Test suite for the CRUD layer against a real SQLite database.

Covers BaseCRUD primitives through the paper, note and chat session CRUD
singletons.

System role: Verification of database layer foundation
"""

import uuid
from datetime import datetime, timezone

from researchly.boundary.db.CRUD import chat_session_crud, note_crud, paper_crud


class TestPaperCRUD:
    """Ownership-scoped paper lookups and summary writes."""

    async def test_get_for_user_should_hide_other_users_papers(self, session_factory, paper_id, user_id) -> None:
        async with session_factory() as db:
            own = await paper_crud.get_for_user(db, uuid.UUID(paper_id), user_id)
            foreign = await paper_crud.get_for_user(db, uuid.UUID(paper_id), "user-2")

        assert own is not None
        assert own.title == "Contrastive Retrieval for Papers"
        assert foreign is None

    async def test_update_summary_should_report_missing_rows(self, session_factory, paper_id) -> None:
        # Act
        async with session_factory() as db, db.begin():
            updated = await paper_crud.update_summary(db, uuid.UUID(paper_id), "short summary")
            missing = await paper_crud.update_summary(db, uuid.uuid4(), "nothing")

        # Assert
        assert updated is True
        assert missing is False
        async with session_factory() as db:
            paper = await paper_crud.get_by_id(db, uuid.UUID(paper_id))
        assert paper.summary == "short summary"


class TestNoteCRUD:
    async def test_upsert_should_create_then_overwrite(self, session_factory) -> None:
        async with session_factory() as db, db.begin():
            created = await note_crud.upsert(db, "paper-x", "user-1", "first")
            note_id = created.id

        async with session_factory() as db, db.begin():
            updated = await note_crud.upsert(db, "paper-x", "user-1", "second")

        assert updated.id == note_id
        assert updated.content == "second"


class TestChatSessionCRUD:
    """Message ordering and cascading clear."""

    async def test_messages_should_keep_insertion_order(self, session_factory, paper_id, user_id) -> None:
        # Arrange
        stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)
        async with session_factory() as db, db.begin():
            row = await chat_session_crud.create(db, paper_id=uuid.UUID(paper_id), user_id=user_id)
            await chat_session_crud.add_messages(
                db,
                row.id,
                [("user", "q1", stamp), ("assistant", "a1", stamp), ("user", "q2", stamp)],
            )

        # Act
        async with session_factory() as db:
            messages = await chat_session_crud.list_messages(db, row.id)

        # Assert
        assert [m.content for m in messages] == ["q1", "a1", "q2"]

    async def test_delete_by_paper_and_user_should_remove_messages(self, session_factory, paper_id, user_id) -> None:
        stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)
        async with session_factory() as db, db.begin():
            row = await chat_session_crud.create(db, paper_id=uuid.UUID(paper_id), user_id=user_id)
            await chat_session_crud.add_messages(db, row.id, [("user", "q", stamp)])

        async with session_factory() as db, db.begin():
            deleted = await chat_session_crud.delete_by_paper_and_user(db, uuid.UUID(paper_id), user_id)
            again = await chat_session_crud.delete_by_paper_and_user(db, uuid.UUID(paper_id), user_id)

        assert deleted is True
        assert again is False
        async with session_factory() as db:
            assert await chat_session_crud.list_messages(db, row.id) == []
