"""
Realtime protocol schemas.

Client event names and inbound payload models for the WebSocket gateway.
Payloads use camelCase keys on the wire.

Dependencies: pydantic
System role: Realtime protocol contracts
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ClientEventType(str, Enum):
    """Client-to-server event names."""

    PING = "ping"
    NOTES_GET = "notes:get"
    NOTES_UPDATE = "notes:update"
    AI_SUMMARY = "ai:summary"
    AI_CHAT = "ai:chat"
    AI_CHAT_HISTORY = "ai:chat:history"
    AI_CHAT_CLEAR = "ai:chat:clear"
    AI_DEFINE = "ai:define"


class ServerEventType(str, Enum):
    """Server-to-client event names outside the streaming operations."""

    CONNECTED = "connected"
    PONG = "pong"
    ERROR = "error"
    NOTES_CONTENT = "notes:content"
    NOTES_SAVED = "notes:saved"
    NOTES_ERROR = "notes:error"
    AI_CHAT_HISTORY_RESPONSE = "ai:chat:history:response"
    AI_CHAT_CLEARED = "ai:chat:cleared"
    AI_CHAT_ERROR = "ai:chat:error"


class PaperRequest(BaseModel):
    """Payload carrying only a paper identifier."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    paper_id: str = Field(alias="paperId", min_length=1)


class NotesUpdateRequest(PaperRequest):
    """Payload for notes:update."""

    content: str


class ChatRequest(PaperRequest):
    """Payload for ai:chat."""

    message: str = Field(min_length=1)


class DefineRequest(PaperRequest):
    """Payload for ai:define."""

    term: str = Field(min_length=1)
    context: str | None = None
