"""Realtime event handlers."""

from researchly.api.realtime.handlers.ai import (
    handle_chat,
    handle_chat_clear,
    handle_chat_history,
    handle_define,
    handle_summary,
)
from researchly.api.realtime.handlers.notes import handle_notes_get, handle_notes_update

__all__ = [
    "handle_chat",
    "handle_chat_clear",
    "handle_chat_history",
    "handle_define",
    "handle_notes_get",
    "handle_notes_update",
    "handle_summary",
]
