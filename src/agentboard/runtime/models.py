"""Data models for the Job Runner Adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class JobStatus(StrEnum):
    """Status of an external job, as reported by poll."""

    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
    CANCELLED = "cancelled"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.RUNNING


@dataclass(frozen=True)
class JobSpec:
    """What to launch.

    Attributes:
        agent_kind: Agent kind value (e.g. "qa-agent"), passed through opaquely.
        ticket_id: Ticket the job works on.
        instructions: Full instruction text for the agent.
        source_ref: Branch or ref the job starts from (None = runtime default).
        target_branch: Branch the job pushes to (None = runtime default).
    """

    agent_kind: str
    ticket_id: str
    instructions: str
    source_ref: str | None = None
    target_branch: str | None = None


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class JobHandle:
    """Opaque reference to a launched job."""

    job_id: str
    status: str = "CREATING"
    launched_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class JobUpdate:
    """Result of one poll.

    Attributes:
        status: Normalized job status.
        partial_text: Progress text while running.
        final_text: Completion report (finished) or failure detail.
        raw_status: Status string as the runtime reported it.
        metadata: Extra fields worth surfacing (e.g. a PR URL).
    """

    status: JobStatus
    partial_text: str | None = None
    final_text: str | None = None
    raw_status: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
