"""
AI operation engine.

Runs summary, chat and term-definition operations as async generators of
tagged events: zero or more ChunkEvents in model order, then exactly one
CompleteEvent or ErrorEvent. Chunks are yielded as soon as the model
produces them. Results are persisted before the completion event, and a
failed operation persists nothing.

Chat context comes from one strategy per deployment:
    cache      provider-side context cache, falling back to the full
               document text when the paper is too small to cache
    retrieval  lazily built per-paper vector index, falling back to the
               full document text when no passages are available
Sessions left over from the other strategy are migrated on their next chat.

History and clear are non-streaming and return Ok/Err results.

Dependencies: langchain_core, researchly.application.services, researchly.boundary.llm
System role: AI operation orchestration
"""

import logging
from collections.abc import AsyncIterator
from typing import Literal

from langchain_core.messages import BaseMessage

from researchly.application.prompts import (
    CACHED_CHAT_PROMPT,
    DEFINE_PROMPT,
    DIRECT_CHAT_PROMPT,
    RAG_CHAT_PROMPT,
    SUMMARY_PROMPT,
    define_context_section,
    to_history,
)
from researchly.application.services.context_cache import ContextCacheManager
from researchly.application.services.paper_service import PaperService, parse_paper_id
from researchly.application.services.retrieval_index import RetrievalIndexService
from researchly.application.services.session_store import SessionStore
from researchly.boundary.llm.gemini_client import GeminiChatClient
from researchly.core.exceptions import (
    ErrorKind,
    NotFoundError,
    PreconditionFailedError,
    ProviderError,
    ResearchlyException,
)
from researchly.core.result import Err, Ok, Result
from researchly.models.paper import PaperRecord
from researchly.models.session import ChatMessage, ChatSession
from researchly.models.streaming import AIEvent, AIOperation, ChunkEvent, CompleteEvent, ErrorEvent
from researchly.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

FAILURE_MESSAGES = {
    AIOperation.SUMMARY: "Failed to generate summary",
    AIOperation.CHAT: "Failed to process chat message",
    AIOperation.DEFINE: "Failed to define term",
}
HISTORY_FAILURE = "Failed to get chat history"
CLEAR_FAILURE = "Failed to clear chat history"


class PaperContent:
    """Loads a paper's bytes and text at most once per operation."""

    def __init__(self, papers: PaperService, paper: PaperRecord) -> None:
        self._papers = papers
        self._paper = paper
        self._document: bytes | None = None
        self._text: str | None = None

    async def document(self) -> bytes:
        if self._document is None:
            self._document = await self._papers.load_document(self._paper)
        return self._document

    async def text(self) -> str:
        if self._text is None:
            if self._document is None:
                self._text = await self._papers.load_text(self._paper)
            else:
                self._text = await self._papers.extract_text(self._paper, self._document)
        return self._text


class AIOperationEngine:
    """Orchestrates AI operations against papers and chat sessions."""

    def __init__(
        self,
        papers: PaperService,
        sessions: SessionStore,
        cache: ContextCacheManager,
        retrieval: RetrievalIndexService,
        model: GeminiChatClient,
        strategy: Literal["cache", "retrieval"] = "cache",
        temperature: float = 0.3,
        define_temperature: float = 0.2,
        chat_top_k: int = 5,
        define_top_k: int = 3,
    ) -> None:
        """
        Initialize engine.

        Args:
            papers: Paper access
            sessions: Chat session store
            cache: Context cache manager (cache strategy)
            retrieval: Retrieval index service (retrieval strategy, definitions)
            model: Streaming model client
            strategy: Active chat context strategy
            temperature: Sampling temperature for summary and chat
            define_temperature: Sampling temperature for definitions
            chat_top_k: Passages retrieved per chat turn
            define_top_k: Passages retrieved per definition
        """
        self._papers = papers
        self._sessions = sessions
        self._cache = cache
        self._retrieval = retrieval
        self._model = model
        self._strategy = strategy
        self._temperature = temperature
        self._define_temperature = define_temperature
        self._chat_top_k = chat_top_k
        self._define_top_k = define_top_k

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _error_event(self, operation: AIOperation, exc: Exception, **context) -> ErrorEvent:
        """Map a failure to the single error event an operation emits."""
        if isinstance(exc, (NotFoundError, PreconditionFailedError)):
            logger.info(f"{__name__}:{operation.value} - {exc.kind.value}: {exc.message}", extra=context)
            return ErrorEvent(kind=exc.kind, message=exc.message)
        log_exception_with_context(
            logger,
            f"{__name__}:{operation.value} - FAILED",
            exc,
            operation=operation.value,
            **context,
        )
        kind = exc.kind if isinstance(exc, ResearchlyException) else ErrorKind.PROVIDER_ERROR
        return ErrorEvent(kind=kind, message=FAILURE_MESSAGES[operation])

    async def _align_strategy(self, session: ChatSession) -> ChatSession:
        """Drop the resource held under the strategy this deployment doesn't use."""
        if self._strategy == "cache" and session.is_indexed:
            logger.info(f"{__name__}:chat - Migrating session from retrieval to cache")
            await self._retrieval.delete(session.paper_id)
            return await self._sessions.save(session.model_copy(update={"is_indexed": False}))
        if self._strategy == "retrieval" and session.cache_handle is not None:
            logger.info(f"{__name__}:chat - Migrating session from cache to retrieval")
            await self._cache.invalidate(session.cache_handle)
            return await self._sessions.save(session.with_cache(None))
        return session

    async def _direct_stream(
        self,
        paper: PaperRecord,
        content: PaperContent,
        history: list[BaseMessage],
        message: str,
    ) -> AsyncIterator[str]:
        messages = DIRECT_CHAT_PROMPT.format_messages(
            paper_title=paper.title,
            document_text=await content.text(),
            history=history,
            question=message,
        )
        logger.info(f"{__name__}:chat - Using direct context, history={len(history)}")
        async for fragment in self._model.stream(messages, self._temperature):
            yield fragment

    async def _chat_stream(
        self,
        paper: PaperRecord,
        session: ChatSession,
        message: str,
    ) -> tuple[ChatSession, AsyncIterator[str]]:
        """Pick the context path for a chat turn and return its text stream."""
        content = PaperContent(self._papers, paper)
        history = to_history(session.messages)

        if self._strategy == "cache":
            handle = await self._cache.ensure(session, paper.title, content.document)
            if handle is None:
                return session, self._direct_stream(paper, content, history, message)
            messages = CACHED_CHAT_PROMPT.format_messages(history=history, question=message)
            logger.info(f"{__name__}:chat - Using context cache name={handle.name}")
            return session, self._model.stream_with_cache(handle.name, messages, self._temperature)

        session = await self._retrieval.ensure_indexed(session, content.text)
        passages: list[str] = []
        if session.is_indexed:
            passages = await self._retrieval.query(paper.id, message, self._chat_top_k)
        if not passages:
            return session, self._direct_stream(paper, content, history, message)
        messages = RAG_CHAT_PROMPT.format_messages(
            paper_title=paper.title,
            context="\n\n".join(passages),
            history=history,
            question=message,
        )
        logger.info(f"{__name__}:chat - Using retrieval context, passages={len(passages)}")
        return session, self._model.stream(messages, self._temperature)

    @staticmethod
    def _require_text(parts: list[str]) -> str:
        text = "".join(parts)
        if not text:
            raise ProviderError("Model returned an empty response", provider="model")
        return text

    # ------------------------------------------------------------------
    # Streaming operations
    # ------------------------------------------------------------------

    async def summarize(self, paper_id: str, user_id: str) -> AsyncIterator[AIEvent]:
        """
        Generate and store a structured summary of a paper.

        Yields:
            AIEvent: chunks, then the full summary or an error
        """
        logger.info(f"{__name__}:summarize - START", extra={"paper_id": paper_id, "user_id": user_id})
        parts: list[str] = []
        try:
            paper = await self._papers.resolve(paper_id, user_id)
            text = await self._papers.load_text(paper)
            messages = SUMMARY_PROMPT.format_messages(text=text)
            async for fragment in self._model.stream(messages, self._temperature):
                parts.append(fragment)
                yield ChunkEvent(text=fragment)
            summary = self._require_text(parts)
            await self._papers.save_summary(paper.id, summary)
        except Exception as e:
            yield self._error_event(AIOperation.SUMMARY, e, paper_id=paper_id, chunks=len(parts))
            return

        logger.info(f"{__name__}:summarize - COMPLETE chars={len(summary)}")
        yield CompleteEvent(text=summary)

    async def chat(self, paper_id: str, user_id: str, message: str) -> AsyncIterator[AIEvent]:
        """
        Answer a question about a paper and record the exchange.

        Yields:
            AIEvent: chunks, then the full reply or an error
        """
        logger.info(
            f"{__name__}:chat - START",
            extra={"paper_id": paper_id, "user_id": user_id, "message_len": len(message)},
        )
        parts: list[str] = []
        try:
            paper = await self._papers.resolve(paper_id, user_id)
            session = await self._sessions.get_or_create(paper.id, user_id)
            session = await self._align_strategy(session)
            session, stream = await self._chat_stream(paper, session, message)
            async for fragment in stream:
                parts.append(fragment)
                yield ChunkEvent(text=fragment)
            reply = self._require_text(parts)
            session = await self._sessions.append_exchange(session, message, reply)
        except Exception as e:
            yield self._error_event(AIOperation.CHAT, e, paper_id=paper_id, chunks=len(parts))
            return

        logger.info(f"{__name__}:chat - COMPLETE chars={len(reply)}, messages={len(session.messages)}")
        yield CompleteEvent(text=reply)

    async def define_term(
        self,
        paper_id: str,
        user_id: str,
        term: str,
        surrounding_context: str | None = None,
    ) -> AsyncIterator[AIEvent]:
        """
        Define a term as used in a paper. Does not touch session state.

        Yields:
            AIEvent: chunks, then the full definition or an error
        """
        logger.info(f"{__name__}:define_term - START", extra={"paper_id": paper_id, "term": term})
        parts: list[str] = []
        try:
            paper = await self._papers.resolve(paper_id, user_id)
            passages: list[str] = []
            session = await self._sessions.get(paper.id, user_id)
            if session is not None and session.is_indexed:
                try:
                    passages = await self._retrieval.query(paper.id, term, self._define_top_k)
                except ResearchlyException as e:
                    logger.warning(f"{__name__}:define_term - Retrieval skipped: {e.message}")
            messages = DEFINE_PROMPT.format_messages(
                paper_title=paper.title,
                context_section=define_context_section(surrounding_context, passages),
                term=term,
            )
            async for fragment in self._model.stream(messages, self._define_temperature):
                parts.append(fragment)
                yield ChunkEvent(text=fragment)
            definition = self._require_text(parts)
        except Exception as e:
            yield self._error_event(AIOperation.DEFINE, e, paper_id=paper_id, chunks=len(parts))
            return

        logger.info(f"{__name__}:define_term - COMPLETE chars={len(definition)}")
        yield CompleteEvent(text=definition)

    # ------------------------------------------------------------------
    # Non-streaming operations
    # ------------------------------------------------------------------

    async def get_history(self, paper_id: str, user_id: str) -> Result[tuple[ChatMessage, ...]]:
        """
        Return the chat history for a paper, oldest first.

        Returns:
            Ok(messages) (empty when there is no session) or Err
        """
        try:
            session = await self._sessions.get(parse_paper_id(paper_id), user_id)
        except NotFoundError as e:
            return Err.from_exception(e)
        except Exception as e:
            log_exception_with_context(logger, f"{__name__}:get_history - FAILED", e, paper_id=paper_id)
            kind = e.kind if isinstance(e, ResearchlyException) else ErrorKind.STORAGE_ERROR
            return Err(kind, HISTORY_FAILURE)
        return Ok(session.messages if session is not None else ())

    async def clear_history(self, paper_id: str, user_id: str) -> Result[None]:
        """
        Invalidate any cache or index held for the session, then delete it.

        Remote invalidation is best-effort; the local delete always runs.

        Returns:
            Ok(None) or Err
        """
        try:
            paper_uuid = parse_paper_id(paper_id)
            session = await self._sessions.get(paper_uuid, user_id)
            if session is not None:
                await self._cache.invalidate(session.cache_handle)
                if session.is_indexed:
                    await self._retrieval.delete(paper_uuid)
            await self._sessions.clear(paper_uuid, user_id)
        except NotFoundError as e:
            return Err.from_exception(e)
        except Exception as e:
            log_exception_with_context(logger, f"{__name__}:clear_history - FAILED", e, paper_id=paper_id)
            kind = e.kind if isinstance(e, ResearchlyException) else ErrorKind.STORAGE_ERROR
            return Err(kind, CLEAR_FAILURE)
        logger.info(f"{__name__}:clear_history - OK", extra={"paper_id": paper_id, "user_id": user_id})
        return Ok(None)
