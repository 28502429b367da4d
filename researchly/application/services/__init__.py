"""Application services behind the realtime operations."""

from researchly.application.services.ai_engine import AIOperationEngine
from researchly.application.services.context_cache import ContextCacheManager
from researchly.application.services.notes_service import NotesService
from researchly.application.services.paper_service import PaperService
from researchly.application.services.retrieval_index import RetrievalIndexService, namespace_for
from researchly.application.services.session_store import SessionStore

__all__ = [
    "AIOperationEngine",
    "ContextCacheManager",
    "NotesService",
    "PaperService",
    "RetrievalIndexService",
    "SessionStore",
    "namespace_for",
]
