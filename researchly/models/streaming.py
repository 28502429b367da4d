"""
Streaming event schemas for AI operations.

The engine yields a sequence of tagged events per operation: zero or more
chunks followed by exactly one completion or error. AIOperation maps those
events onto realtime wire event names and payloads.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict

from researchly.core.exceptions import ErrorKind


class ChunkEvent(BaseModel):
    """Incremental fragment of model output."""

    model_config = ConfigDict(frozen=True)

    type: Literal["chunk"] = "chunk"
    text: str


class CompleteEvent(BaseModel):
    """Terminal event carrying the full accumulated text."""

    model_config = ConfigDict(frozen=True)

    type: Literal["complete"] = "complete"
    text: str


class ErrorEvent(BaseModel):
    """Terminal event describing why the operation failed."""

    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    kind: ErrorKind
    message: str


AIEvent = Union[ChunkEvent, CompleteEvent, ErrorEvent]


class AIOperation(str, Enum):
    """Streaming AI operations and their wire naming."""

    SUMMARY = "summary"
    CHAT = "chat"
    DEFINE = "define"

    @property
    def complete_field(self) -> str:
        """Payload key holding the full text on completion."""
        return {
            AIOperation.SUMMARY: "summary",
            AIOperation.CHAT: "response",
            AIOperation.DEFINE: "definition",
        }[self]

    @property
    def error_event(self) -> str:
        """Wire name of this operation's error event."""
        return f"ai:{self.value}:error"

    def to_wire(self, paper_id: str, event: AIEvent) -> tuple[str, dict[str, Any]]:
        """
        Convert an engine event into a realtime (event name, payload) pair.

        Args:
            paper_id: Paper the operation runs against, echoed for demultiplexing
            event: Engine event

        Returns:
            tuple[str, dict]: Wire event name and payload
        """
        if isinstance(event, ChunkEvent):
            return f"ai:{self.value}:chunk", {"paperId": paper_id, "chunk": event.text, "done": False}
        if isinstance(event, CompleteEvent):
            return f"ai:{self.value}:complete", {"paperId": paper_id, self.complete_field: event.text}
        return self.error_event, {
            "paperId": paper_id,
            "error": event.message,
            "code": event.kind.value,
        }
