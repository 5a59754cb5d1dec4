"""Data models for triggers and agent kinds."""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

_BASE36 = string.digits + string.ascii_lowercase


class AgentKind(StrEnum):
    """Agent kinds; each one owns exactly one conversation log."""

    PROJECT_MANAGER = "project-manager"
    IMPLEMENTATION = "implementation-agent"
    QA = "qa-agent"
    STANDUP = "standup"

    @property
    def is_runnable(self) -> bool:
        """Whether a trigger for this kind starts an AgentRun."""
        return self in (AgentKind.IMPLEMENTATION, AgentKind.QA)

    @property
    def display_name(self) -> str:
        """Name used as a prefix in conversation messages."""
        return AGENT_DISPLAY_NAMES[self]


AGENT_DISPLAY_NAMES = {
    AgentKind.PROJECT_MANAGER: "PM",
    AgentKind.IMPLEMENTATION: "Implementation Agent",
    AgentKind.QA: "QA Agent",
    AgentKind.STANDUP: "Standup",
}


def new_event_id() -> str:
    """Generate a trigger event ID: ``work-btn-<epoch ms>-<7 base36 chars>``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"work-btn-{int(time.time() * 1000)}-{suffix}"


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class TriggerEvent:
    """One user-initiated action.

    The event ID is assigned where the action is dispatched, so every
    delivery of the same physical click carries the same ID.
    """

    event_id: str
    agent_kind: AgentKind
    content: str
    created_at: datetime = field(default_factory=_now)

    @classmethod
    def create(cls, agent_kind: AgentKind | str, content: str) -> TriggerEvent:
        """Create a trigger with a fresh event ID."""
        return cls(event_id=new_event_id(), agent_kind=AgentKind(agent_kind), content=content)


@dataclass(frozen=True)
class TriggerDecision:
    """Result of TriggerDeduplicator.accept."""

    accepted: bool
    event_id: str
    reason: str | None = None
