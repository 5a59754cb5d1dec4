"""Server-Sent Events (SSE) endpoint."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from agentboard.api.dependencies import EventManagerDep
from agentboard.triggers import AgentKind  # noqa: TC001 - needed at runtime by FastAPI

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/stream")
async def event_stream(
    event_manager: EventManagerDep,
    agent_kind: AgentKind | None = Query(default=None, description="Filter by conversation"),
) -> StreamingResponse:
    """Subscribe to the live stream of conversation messages and run events.

    A heartbeat is sent when nothing happened for heartbeat_interval seconds.
    """
    subscriber = event_manager.subscribe(agent_kind.value if agent_kind else None)

    async def generate() -> AsyncGenerator[str, None]:
        try:
            while True:
                try:
                    event = await asyncio.wait_for(
                        subscriber.queue.get(),
                        timeout=event_manager.heartbeat_interval,
                    )
                    yield event.to_sse()
                except TimeoutError:
                    yield event_manager.create_heartbeat_event().to_sse()
        finally:
            event_manager.unsubscribe(subscriber.id)

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
