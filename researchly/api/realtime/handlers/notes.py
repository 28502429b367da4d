"""
Notes event handlers.

Dependencies: researchly.application.services.notes_service
System role: notes:* realtime events
"""

from typing import Any

from researchly.api.deps.container import ServiceContainer
from researchly.api.realtime.connection import RealtimeConnection
from researchly.core.result import Ok
from researchly.models.realtime import NotesUpdateRequest, PaperRequest, ServerEventType


async def handle_notes_get(
    connection: RealtimeConnection,
    container: ServiceContainer,
    data: dict[str, Any],
) -> None:
    request = PaperRequest.model_validate(data)
    result = await container.notes.get_or_create(request.paper_id, connection.user.user_id)
    if isinstance(result, Ok):
        await connection.emit(
            ServerEventType.NOTES_CONTENT.value,
            {"paperId": request.paper_id, "content": result.value.content},
        )
    else:
        await connection.emit(
            ServerEventType.NOTES_ERROR.value,
            {"paperId": request.paper_id, "error": result.message},
        )


async def handle_notes_update(
    connection: RealtimeConnection,
    container: ServiceContainer,
    data: dict[str, Any],
) -> None:
    request = NotesUpdateRequest.model_validate(data)
    result = await container.notes.update(request.paper_id, connection.user.user_id, request.content)
    if isinstance(result, Ok):
        await connection.emit(
            ServerEventType.NOTES_SAVED.value,
            {
                "paperId": request.paper_id,
                "success": True,
                "updatedAt": result.value.updated_at.isoformat(),
            },
        )
    else:
        await connection.emit(
            ServerEventType.NOTES_ERROR.value,
            {"paperId": request.paper_id, "error": result.message},
        )
