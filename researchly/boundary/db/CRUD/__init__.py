"""CRUD singletons for the ORM models."""

from researchly.boundary.db.CRUD.chat_session_crud import ChatSessionCRUD, chat_session_crud
from researchly.boundary.db.CRUD.note_crud import NoteCRUD, note_crud
from researchly.boundary.db.CRUD.paper_crud import PaperCRUD, paper_crud

__all__ = [
    "ChatSessionCRUD",
    "NoteCRUD",
    "PaperCRUD",
    "chat_session_crud",
    "note_crud",
    "paper_crud",
]
