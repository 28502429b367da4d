"""
Realtime WebSocket gateway.

One authenticated connection per client multiplexes notes and AI
operations for any number of papers. Every outbound frame for an operation
carries the request's paperId.

Routes: WS /ws

Client sends:
    {"event": "ai:chat", "data": {"paperId": "...", "message": "..."}}
    {"event": "ping", "data": {}}

Server sends:
    {"event": "connected", "data": {"userId": "..."}}
    {"event": "ai:chat:chunk", "data": {"paperId": "...", "chunk": "...", "done": false}}
    {"event": "ai:chat:complete", "data": {"paperId": "...", "response": "..."}}
    {"event": "ai:chat:error", "data": {"paperId": "...", "error": "...", "code": "..."}}
    {"event": "error", "data": {"code": "...", "message": "..."}}

Dependencies: fastapi, researchly.api.realtime
System role: Realtime API entry point
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from researchly.api.deps.container import get_container
from researchly.api.realtime.auth import extract_token
from researchly.api.realtime.connection import RealtimeConnection
from researchly.api.realtime.dispatcher import RealtimeDispatcher
from researchly.core.exceptions import AuthError
from researchly.models.realtime import ServerEventType

logger = logging.getLogger(__name__)
router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def realtime_gateway(websocket: WebSocket) -> None:
    """
    Authenticate, then serve inbound events until the client disconnects.

    Invalid, expired or missing credentials close the handshake with policy
    violation (1008) before accept. After disconnect, in-flight operations
    are awaited so their persistence completes.
    """
    container = get_container(websocket)
    try:
        user = container.verifier.verify(extract_token(websocket))
    except AuthError as e:
        logger.warning(
            "WebSocket authentication rejected",
            extra={"reason": e.message, "client_host": str(websocket.client)},
        )
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return

    await websocket.accept()
    connection = RealtimeConnection(websocket, user)
    dispatcher = RealtimeDispatcher(container)
    logger.info("WebSocket connection established", extra={"user_id": user.user_id})
    await connection.emit(ServerEventType.CONNECTED.value, {"userId": user.user_id})

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
            raw = message.get("text")
            if raw is None:
                await dispatcher.reject_binary(connection)
                continue
            await dispatcher.dispatch(connection, raw)
    except WebSocketDisconnect as e:
        logger.info(
            "WebSocket disconnected",
            extra={"user_id": user.user_id, "close_code": e.code, "in_flight": connection.in_flight},
        )
    finally:
        connection.mark_closed()
        await connection.drain()
