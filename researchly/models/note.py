"""
Note record for per-paper user notes.

Dependencies: pydantic
System role: Notes value object
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NoteRecord(BaseModel):
    """A user's free-form notes for one paper."""

    model_config = ConfigDict(frozen=True)

    paper_id: str
    user_id: str
    content: str = ""
    updated_at: datetime
