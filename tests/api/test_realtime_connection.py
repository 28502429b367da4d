"""
Test suite for RealtimeConnection.

System role: Verification of per-connection send and task lifetime rules
"""

import asyncio

from starlette.websockets import WebSocketDisconnect

from researchly.api.realtime.auth import AuthenticatedUser
from researchly.api.realtime.connection import RealtimeConnection
from researchly.observability.correlation import get_correlation_id


class FakeSocket:
    def __init__(self, fail_with: Exception | None = None) -> None:
        self.sent: list[dict] = []
        self.fail_with = fail_with

    async def send_json(self, data: dict) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(data)


def make_connection(socket: FakeSocket) -> RealtimeConnection:
    return RealtimeConnection(socket, AuthenticatedUser(user_id="user-1"))


class TestEmit:
    async def test_emit_should_wrap_event_and_data(self) -> None:
        socket = FakeSocket()
        connection = make_connection(socket)

        assert await connection.emit("pong", {}) is True

        assert socket.sent == [{"event": "pong", "data": {}}]

    async def test_emit_after_close_should_drop_frame(self) -> None:
        socket = FakeSocket()
        connection = make_connection(socket)
        connection.mark_closed()

        assert await connection.emit("pong", {}) is False
        assert socket.sent == []

    async def test_send_failure_should_mark_connection_closed(self) -> None:
        connection = make_connection(FakeSocket(fail_with=WebSocketDisconnect(1001)))

        assert await connection.emit("pong", {}) is False
        assert connection.closed is True


class TestSpawnAndDrain:
    async def test_drain_should_wait_for_operations_after_close(self) -> None:
        # Arrange
        connection = make_connection(FakeSocket())
        finished = asyncio.Event()

        async def slow_operation() -> None:
            await asyncio.sleep(0.01)
            finished.set()

        connection.spawn(slow_operation(), name="ai:chat")

        # Act
        connection.mark_closed()
        await connection.drain()

        # Assert
        assert finished.is_set()
        assert connection.in_flight == 0

    async def test_cancelled_drain_should_leave_operations_running(self) -> None:
        # Arrange
        connection = make_connection(FakeSocket())
        finished = asyncio.Event()

        async def slow_operation() -> None:
            await asyncio.sleep(0.05)
            finished.set()

        task = connection.spawn(slow_operation(), name="ai:chat")
        connection.mark_closed()
        waiter = asyncio.create_task(connection.drain())
        await asyncio.sleep(0)

        # Act
        waiter.cancel()
        await task

        # Assert
        assert waiter.cancelled()
        assert finished.is_set()

    async def test_crashing_operation_should_not_propagate(self) -> None:
        connection = make_connection(FakeSocket())

        async def broken() -> None:
            raise RuntimeError("boom")

        task = connection.spawn(broken(), name="ai:summary")
        await task

        assert task.exception() is None

    async def test_each_operation_should_get_its_own_correlation_id(self) -> None:
        connection = make_connection(FakeSocket())
        seen: list[str] = []

        async def record() -> None:
            seen.append(get_correlation_id())

        connection.spawn(record(), name="a")
        connection.spawn(record(), name="b")
        await connection.drain()

        assert len(set(seen)) == 2
        assert "-" not in seen
