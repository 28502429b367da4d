"""
Test suite for RetrievalIndexService.

System role: Verification of lazy per-paper indexing
"""

import uuid

from conftest import PAPER_TEXT
from researchly.application.services.retrieval_index import namespace_for


class TestSplit:
    def test_split_should_respect_chunk_size(self, retrieval_service) -> None:
        passages = retrieval_service.split(PAPER_TEXT)

        assert len(passages) > 1
        assert all(len(p) <= 200 for p in passages)

    def test_split_empty_text_should_yield_nothing(self, retrieval_service) -> None:
        assert retrieval_service.split("") == []


class TestEnsureIndexed:
    """Test suite for RetrievalIndexService.ensure_indexed."""

    async def test_unindexed_session_should_be_indexed_and_flagged(
        self, retrieval_service, session_store, paper_id, user_id, fake_vector_index
    ) -> None:
        # Arrange
        session = await session_store.get_or_create(uuid.UUID(paper_id), user_id)

        async def load_text() -> str:
            return PAPER_TEXT

        # Act
        updated = await retrieval_service.ensure_indexed(session, load_text)

        # Assert
        assert updated.is_indexed is True
        assert fake_vector_index.namespaces[namespace_for(paper_id)]
        stored = await session_store.get(uuid.UUID(paper_id), user_id)
        assert stored.is_indexed is True

    async def test_indexed_session_should_not_load_text(
        self, retrieval_service, session_store, paper_id, user_id, fake_vector_index
    ) -> None:
        session = await session_store.get_or_create(uuid.UUID(paper_id), user_id)
        session = await session_store.save(session.model_copy(update={"is_indexed": True}))

        async def load_text() -> str:
            raise AssertionError("text should not be loaded")

        result = await retrieval_service.ensure_indexed(session, load_text)

        assert result is session
        assert fake_vector_index.upserts == 0

    async def test_empty_text_should_leave_flag_unset(
        self, retrieval_service, session_store, paper_id, user_id
    ) -> None:
        session = await session_store.get_or_create(uuid.UUID(paper_id), user_id)

        async def load_text() -> str:
            return ""

        result = await retrieval_service.ensure_indexed(session, load_text)

        assert result.is_indexed is False


class TestQueryAndDelete:
    async def test_query_should_return_matching_passages(self, retrieval_service, fake_vector_index) -> None:
        paper = uuid.uuid4()
        fake_vector_index.namespaces[namespace_for(paper)] = ["alpha beta", "gamma"]

        assert await retrieval_service.query(paper, "beta", 3) == ["alpha beta"]

    async def test_delete_should_swallow_index_errors(self, retrieval_service, fake_vector_index) -> None:
        fake_vector_index.delete_error = RuntimeError("index down")

        await retrieval_service.delete(uuid.uuid4())
