"""
Service container.

Composition root: builds every provider client and service once per process
from settings, and owns their shutdown. The FastAPI lifespan stores the
container on app.state; tests pass a container of fakes to create_app.

Dependencies: sqlalchemy, google.genai, httpx, researchly.application, researchly.boundary
System role: Dependency construction and lifetime management
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from google import genai
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.requests import HTTPConnection

from researchly.api.realtime.auth import CredentialVerifier
from researchly.application.services import (
    AIOperationEngine,
    ContextCacheManager,
    NotesService,
    PaperService,
    RetrievalIndexService,
    SessionStore,
)
from researchly.boundary.db.connection import get_async_engine, get_async_session_factory
from researchly.boundary.llm import GeminiChatClient, GeminiContextCacheClient
from researchly.boundary.storage import DocumentFetcher, PdfTextExtractor
from researchly.boundary.vdb import FAISSNamespaceIndex, GeminiEmbeddings
from researchly.configs.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Process-scoped services shared by all connections."""

    engine: AIOperationEngine
    notes: NotesService
    verifier: CredentialVerifier
    db_engine: AsyncEngine | None = None
    closers: list[Callable[[], Awaitable[None]]] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContainer":
        """
        Build all clients and services from settings.

        Args:
            settings: Application settings

        Returns:
            ServiceContainer: Wired container
        """
        db_engine = get_async_engine(settings.database)
        session_factory = get_async_session_factory(db_engine)

        api_key = settings.gemini.api_key.get_secret_value() or None
        genai_client = genai.Client(api_key=api_key)
        model = GeminiChatClient(settings.gemini, genai_client=genai_client)
        cache_client = GeminiContextCacheClient(genai_client, settings.gemini.model_id)

        embeddings = GeminiEmbeddings(
            model=settings.gemini.embedding_model,
            output_dimensionality=settings.gemini.embedding_dimension,
            google_api_key=api_key,
        )
        vector_index = FAISSNamespaceIndex(
            embeddings,
            settings.vector_store.persist_directory,
            max_loaded=settings.vector_store.max_loaded_namespaces,
        )

        fetcher = DocumentFetcher(settings.documents)
        sessions = SessionStore(session_factory)
        papers = PaperService(session_factory, fetcher, PdfTextExtractor())
        cache = ContextCacheManager(
            cache_client,
            sessions,
            ttl_seconds=settings.context.cache_ttl_seconds,
        )
        retrieval = RetrievalIndexService(
            vector_index,
            sessions,
            chunk_size=settings.context.chunk_size,
            chunk_overlap=settings.context.chunk_overlap,
        )
        engine = AIOperationEngine(
            papers=papers,
            sessions=sessions,
            cache=cache,
            retrieval=retrieval,
            model=model,
            strategy=settings.context.strategy,
            temperature=settings.gemini.temperature,
            define_temperature=settings.gemini.define_temperature,
            chat_top_k=settings.context.chat_top_k,
            define_top_k=settings.context.define_top_k,
        )
        logger.info(
            "Service container built",
            extra={"strategy": settings.context.strategy, "model_id": settings.gemini.model_id},
        )
        return cls(
            engine=engine,
            notes=NotesService(session_factory),
            verifier=CredentialVerifier(settings.auth),
            db_engine=db_engine,
            closers=[fetcher.aclose],
        )

    async def aclose(self) -> None:
        """Release HTTP clients and dispose the database engine."""
        for close in self.closers:
            await close()
        if self.db_engine is not None:
            await self.db_engine.dispose()


def get_container(connection: HTTPConnection) -> ServiceContainer:
    """Return the service container of the app serving a request or socket."""
    return connection.app.state.container

