"""
AI event handlers.

Streaming operations forward engine events as they arrive, tagged with the
request's paperId. History and clear branch on the Ok/Err result.

Dependencies: researchly.application.services, researchly.models
System role: ai:* realtime events
"""

from collections.abc import AsyncIterator
from typing import Any

from researchly.api.deps.container import ServiceContainer
from researchly.api.realtime.connection import RealtimeConnection
from researchly.core.result import Ok
from researchly.models.realtime import ChatRequest, DefineRequest, PaperRequest, ServerEventType
from researchly.models.streaming import AIEvent, AIOperation


async def forward_events(
    connection: RealtimeConnection,
    operation: AIOperation,
    paper_id: str,
    events: AsyncIterator[AIEvent],
) -> None:
    """Send each engine event to the client in order."""
    async for event in events:
        name, payload = operation.to_wire(paper_id, event)
        await connection.emit(name, payload)


async def handle_summary(
    connection: RealtimeConnection,
    container: ServiceContainer,
    data: dict[str, Any],
) -> None:
    request = PaperRequest.model_validate(data)
    events = container.engine.summarize(request.paper_id, connection.user.user_id)
    await forward_events(connection, AIOperation.SUMMARY, request.paper_id, events)


async def handle_chat(
    connection: RealtimeConnection,
    container: ServiceContainer,
    data: dict[str, Any],
) -> None:
    request = ChatRequest.model_validate(data)
    events = container.engine.chat(request.paper_id, connection.user.user_id, request.message)
    await forward_events(connection, AIOperation.CHAT, request.paper_id, events)


async def handle_define(
    connection: RealtimeConnection,
    container: ServiceContainer,
    data: dict[str, Any],
) -> None:
    request = DefineRequest.model_validate(data)
    events = container.engine.define_term(
        request.paper_id,
        connection.user.user_id,
        request.term,
        request.context,
    )
    await forward_events(connection, AIOperation.DEFINE, request.paper_id, events)


async def handle_chat_history(
    connection: RealtimeConnection,
    container: ServiceContainer,
    data: dict[str, Any],
) -> None:
    request = PaperRequest.model_validate(data)
    result = await container.engine.get_history(request.paper_id, connection.user.user_id)
    if isinstance(result, Ok):
        await connection.emit(
            ServerEventType.AI_CHAT_HISTORY_RESPONSE.value,
            {
                "paperId": request.paper_id,
                "messages": [
                    {
                        "role": m.role,
                        "content": m.content,
                        "timestamp": m.timestamp.isoformat(),
                    }
                    for m in result.value
                ],
            },
        )
    else:
        await connection.emit(
            ServerEventType.AI_CHAT_ERROR.value,
            {"paperId": request.paper_id, "error": result.message, "code": result.kind.value},
        )


async def handle_chat_clear(
    connection: RealtimeConnection,
    container: ServiceContainer,
    data: dict[str, Any],
) -> None:
    request = PaperRequest.model_validate(data)
    result = await container.engine.clear_history(request.paper_id, connection.user.user_id)
    if isinstance(result, Ok):
        await connection.emit(
            ServerEventType.AI_CHAT_CLEARED.value,
            {"paperId": request.paper_id, "success": True},
        )
    else:
        await connection.emit(
            ServerEventType.AI_CHAT_ERROR.value,
            {"paperId": request.paper_id, "error": result.message, "code": result.kind.value},
        )
