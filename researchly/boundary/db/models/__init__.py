"""ORM models."""

from researchly.boundary.db.models.chat_session_model import ChatMessageModel, ChatSessionModel
from researchly.boundary.db.models.note_model import NoteModel
from researchly.boundary.db.models.paper_model import PaperModel

__all__ = [
    "ChatMessageModel",
    "ChatSessionModel",
    "NoteModel",
    "PaperModel",
]
