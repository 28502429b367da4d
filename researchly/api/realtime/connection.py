"""
Realtime connection state.

Wraps an accepted WebSocket with the identity bound at handshake, a send
lock that serialises frames from concurrent operations, and the set of
in-flight operation tasks. Once closed, sends are dropped while running
operations continue to completion.

Dependencies: asyncio, starlette
System role: Per-connection state for the realtime gateway
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from starlette.websockets import WebSocket, WebSocketDisconnect

from researchly.api.realtime.auth import AuthenticatedUser
from researchly.observability.correlation import set_correlation_id
from researchly.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class RealtimeConnection:
    """One authenticated client connection."""

    def __init__(self, websocket: WebSocket, user: AuthenticatedUser) -> None:
        self.websocket = websocket
        self.user = user
        self._send_lock = asyncio.Lock()
        self._closed = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def emit(self, event: str, data: dict[str, Any]) -> bool:
        """
        Send one {"event", "data"} frame.

        Returns:
            bool: False when the frame was dropped because the connection is closed
        """
        if self._closed:
            return False
        async with self._send_lock:
            if self._closed:
                return False
            try:
                await self.websocket.send_json({"event": event, "data": data})
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.info(f"{__name__}:emit - Connection gone, dropping {event}: {type(e).__name__}")
                self._closed = True
                return False
        return True

    def spawn(self, operation: Coroutine[Any, Any, None], name: str) -> asyncio.Task:
        """
        Run an inbound operation concurrently with the receive loop.

        Each task gets its own correlation id.
        """
        task = asyncio.create_task(self._run(operation, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, operation: Coroutine[Any, Any, None], name: str) -> None:
        correlation_id = set_correlation_id()
        logger.info(
            f"{__name__}:run - START {name}",
            extra={"user_id": self.user.user_id, "operation_id": correlation_id},
        )
        try:
            await operation
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:run - Operation crashed {name}",
                e,
                user_id=self.user.user_id,
            )

    def mark_closed(self) -> None:
        """Stop delivering frames; running operations keep going."""
        self._closed = True

    async def drain(self) -> None:
        """
        Wait for in-flight operations to finish.

        Cancelling the wait leaves the operations running.
        """
        if self._tasks:
            logger.info(f"{__name__}:drain - Waiting for {len(self._tasks)} operation(s)")
            await asyncio.wait(list(self._tasks))
