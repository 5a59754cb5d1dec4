"""Event manager for Server-Sent Events (SSE)."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from uuid import uuid4


class EventType(StrEnum):
    """Types of events that can be emitted."""

    MESSAGE = "message"
    RUN_STARTED = "run_started"
    RUN_FINISHED = "run_finished"
    HEARTBEAT = "heartbeat"


@dataclass
class Event:
    """An event to be sent via SSE."""

    event_type: EventType
    data: dict[str, Any]
    agent_kind: str | None = None

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream."""

    id: str
    queue: asyncio.Queue[Event]
    agent_kind: str | None = None  # None means every conversation

    @classmethod
    def create(cls, agent_kind: str | None = None) -> Subscriber:
        """Create a new subscriber."""
        return cls(id=str(uuid4()), queue=asyncio.Queue(), agent_kind=agent_kind)

    def wants(self, event: Event) -> bool:
        return self.agent_kind is None or event.agent_kind in (None, self.agent_kind)


@dataclass
class EventManager:
    """Fans routed messages and run lifecycle events out to SSE subscribers."""

    _subscribers: dict[str, Subscriber] = field(default_factory=dict)
    heartbeat_interval: float = 30.0

    def subscribe(self, agent_kind: str | None = None) -> Subscriber:
        """Subscribe a client to events.

        Args:
            agent_kind: Only receive events of this conversation. None means all.

        Returns:
            Subscriber instance for receiving events.
        """
        subscriber = Subscriber.create(agent_kind)
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client from events."""
        self._subscribers.pop(subscriber_id, None)

    async def emit(self, event: Event) -> None:
        """Emit an event to all matching subscribers."""
        for subscriber in list(self._subscribers.values()):
            if subscriber.wants(event):
                await subscriber.queue.put(event)

    def emit_sync(self, event: Event) -> None:
        """Emit an event from non-async code."""
        for subscriber in list(self._subscribers.values()):
            if subscriber.wants(event):
                subscriber.queue.put_nowait(event)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    def emit_message(self, message_data: dict[str, Any]) -> None:
        """Emit a message event for a message appended to a conversation log."""
        self.emit_sync(
            Event(
                event_type=EventType.MESSAGE,
                agent_kind=message_data.get("agent_kind"),
                data=message_data,
            )
        )

    def emit_run_started(self, run_id: str, agent_kind: str, event_id: str) -> None:
        """Emit a run_started event."""
        self.emit_sync(
            Event(
                event_type=EventType.RUN_STARTED,
                agent_kind=agent_kind,
                data={"run_id": run_id, "agent_kind": agent_kind, "event_id": event_id},
            )
        )

    def emit_run_finished(self, run_id: str, agent_kind: str, outcome: str | None) -> None:
        """Emit a run_finished event."""
        self.emit_sync(
            Event(
                event_type=EventType.RUN_FINISHED,
                agent_kind=agent_kind,
                data={"run_id": run_id, "agent_kind": agent_kind, "outcome": outcome},
            )
        )

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(
            event_type=EventType.HEARTBEAT,
            data={"timestamp": datetime.now(UTC).isoformat()},
        )
