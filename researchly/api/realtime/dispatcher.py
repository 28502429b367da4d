"""
Realtime event dispatcher.

Parses inbound {"event", "data"} frames and routes them to handlers. Every
operation except ping runs as its own task on the connection, so a long
summary never blocks a chat on another paper.

Dependencies: pydantic, researchly.api.realtime.handlers
System role: Inbound event demultiplexing
"""

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from researchly.api.deps.container import ServiceContainer
from researchly.api.realtime.connection import RealtimeConnection
from researchly.api.realtime.handlers import (
    handle_chat,
    handle_chat_clear,
    handle_chat_history,
    handle_define,
    handle_notes_get,
    handle_notes_update,
    handle_summary,
)
from researchly.models.realtime import ClientEventType, ServerEventType
from researchly.models.streaming import AIOperation

logger = logging.getLogger(__name__)

Handler = Callable[[RealtimeConnection, ServiceContainer, dict[str, Any]], Awaitable[None]]

INVALID_PAYLOAD = "invalid_payload"


@dataclass(frozen=True)
class Route:
    """Handler for one client event and the event its failures are reported on."""

    handler: Handler
    error_event: str


ROUTES: dict[str, Route] = {
    ClientEventType.NOTES_GET.value: Route(handle_notes_get, ServerEventType.NOTES_ERROR.value),
    ClientEventType.NOTES_UPDATE.value: Route(handle_notes_update, ServerEventType.NOTES_ERROR.value),
    ClientEventType.AI_SUMMARY.value: Route(handle_summary, AIOperation.SUMMARY.error_event),
    ClientEventType.AI_CHAT.value: Route(handle_chat, AIOperation.CHAT.error_event),
    ClientEventType.AI_CHAT_HISTORY.value: Route(handle_chat_history, ServerEventType.AI_CHAT_ERROR.value),
    ClientEventType.AI_CHAT_CLEAR.value: Route(handle_chat_clear, ServerEventType.AI_CHAT_ERROR.value),
    ClientEventType.AI_DEFINE.value: Route(handle_define, AIOperation.DEFINE.error_event),
}


class RealtimeDispatcher:
    """Route inbound frames for one connection."""

    def __init__(self, container: ServiceContainer) -> None:
        self._container = container

    async def _error(self, connection: RealtimeConnection, code: str, message: str) -> None:
        await connection.emit(ServerEventType.ERROR.value, {"code": code, "message": message})

    async def reject_binary(self, connection: RealtimeConnection) -> None:
        """Answer a binary frame; the protocol is JSON text only."""
        logger.warning("Binary frame rejected", extra={"user_id": connection.user.user_id})
        await self._error(connection, "invalid_message", "Expected a JSON text frame")

    async def dispatch(self, connection: RealtimeConnection, raw: str) -> None:
        """
        Handle one inbound text frame.

        Args:
            connection: Connection the frame arrived on
            raw: Frame text
        """
        try:
            message = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(
                "Failed to parse JSON",
                extra={"user_id": connection.user.user_id, "error_msg": str(e), "raw_data_preview": raw[:50]},
            )
            await self._error(connection, "invalid_json", "Invalid JSON format")
            return

        if not isinstance(message, dict) or not isinstance(message.get("event"), str):
            await self._error(connection, "invalid_message", "Expected an object with an event name")
            return

        event = message["event"]
        data = message.get("data") or {}
        if not isinstance(data, dict):
            await self._error(connection, "invalid_message", "Event data must be an object")
            return

        if event == ClientEventType.PING.value:
            await connection.emit(ServerEventType.PONG.value, {})
            return

        route = ROUTES.get(event)
        if route is None:
            logger.warning("Unknown event", extra={"user_id": connection.user.user_id, "event_type": event})
            await self._error(connection, "unknown_event", f"Unknown event: {event}")
            return

        logger.debug("Dispatching event", extra={"event_type": event, "in_flight": connection.in_flight})
        connection.spawn(self._run(route, connection, data), name=event)

    async def _run(self, route: Route, connection: RealtimeConnection, data: dict[str, Any]) -> None:
        try:
            await route.handler(connection, self._container, data)
        except ValidationError as e:
            paper_id = data.get("paperId")
            logger.info(
                "Invalid payload",
                extra={"error_event": route.error_event, "error_count": e.error_count()},
            )
            if isinstance(paper_id, str) and paper_id:
                await connection.emit(
                    route.error_event,
                    {"paperId": paper_id, "error": "Invalid request payload", "code": INVALID_PAYLOAD},
                )
            else:
                await self._error(connection, INVALID_PAYLOAD, "Invalid request payload")
