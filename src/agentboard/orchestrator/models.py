"""Data models for the Orchestrator module."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from agentboard.conversations.models import MessageLabel

if TYPE_CHECKING:
    from agentboard.triggers.models import AgentKind, TriggerEvent
    from agentboard.verdict import Verdict


class RunStage(StrEnum):
    """Stages of a run, in order. Completed and failed are terminal."""

    PREPARING = "preparing"
    FETCHING_TICKET = "fetching_ticket"
    RESOLVING_TARGET = "resolving_target"
    LAUNCHING = "launching"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStage.COMPLETED, RunStage.FAILED)

    @property
    def order(self) -> int:
        return _STAGE_ORDER[self]


_STAGE_ORDER = {stage: index for index, stage in enumerate(RunStage)}
# Both terminal stages sit after polling
_STAGE_ORDER[RunStage.FAILED] = _STAGE_ORDER[RunStage.COMPLETED]


class RunOutcome(StrEnum):
    """Terminal outcome of a run."""

    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


def _now() -> datetime:
    return datetime.now(UTC)


def new_run_id() -> str:
    """Generate a run ID."""
    return f"run-{uuid.uuid4().hex[:12]}"


@dataclass
class AgentRun:
    """One attempt to execute a work agent against one ticket.

    Lives only while in flight; the conversation log is the record once it
    has finished.
    """

    run_id: str
    agent_kind: AgentKind
    trigger_event_id: str
    content: str
    stage: RunStage = RunStage.PREPARING
    started_at: datetime = field(default_factory=_now)
    ticket_id: str | None = None
    job_id: str | None = None
    outcome: RunOutcome | None = None
    report: str | None = None
    verdict: Verdict | None = None
    finished_at: datetime | None = None
    diagnostics: list[str] = field(default_factory=list)
    _sequence: int = field(default=0, repr=False)

    @classmethod
    def from_trigger(cls, trigger: TriggerEvent) -> AgentRun:
        """Create a run for an accepted trigger."""
        return cls(
            run_id=new_run_id(),
            agent_kind=trigger.agent_kind,
            trigger_event_id=trigger.event_id,
            content=trigger.content,
        )

    @property
    def is_terminal(self) -> bool:
        return self.stage.is_terminal

    def advance(self, stage: RunStage) -> None:
        """Move to a stage. Stages only move forward; polling may repeat.

        Raises:
            ValueError: On a backward move or a move out of a terminal stage.
        """
        if self.stage.is_terminal:
            raise ValueError(f"Run {self.run_id} already ended in {self.stage.value}")
        if stage.order < self.stage.order:
            raise ValueError(
                f"Run {self.run_id} cannot go back from {self.stage.value} to {stage.value}"
            )
        self.stage = stage
        if stage.is_terminal:
            self.finished_at = _now()

    def next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "run_id": self.run_id,
            "agent_kind": self.agent_kind.value,
            "trigger_event_id": self.trigger_event_id,
            "content": self.content,
            "stage": self.stage.value,
            "started_at": self.started_at.isoformat(),
            "ticket_id": self.ticket_id,
            "job_id": self.job_id,
            "outcome": self.outcome.value if self.outcome else None,
            "report": self.report,
            "verdict": self.verdict.outcome.value if self.verdict else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "diagnostics": list(self.diagnostics),
        }


@dataclass(frozen=True)
class StageEvent:
    """One event in a run's ordered event stream.

    Terminal events carry the full report text in message.
    """

    run_id: str
    sequence: int
    stage: RunStage
    message: str
    terminal: bool = False
    label: MessageLabel = MessageLabel.STAGE
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class PollPolicy:
    """Polling cadence and limits for a run.

    Attributes:
        interval: Seconds between polls.
        timeout: Wall-clock budget in seconds for the whole poll loop.
        max_retries: Consecutive transport failures tolerated before failing.
    """

    interval: float = 4.0
    timeout: float = 30 * 60.0
    max_retries: int = 3


@dataclass(frozen=True)
class DispatchResult:
    """Result of dispatching one trigger.

    Attributes:
        accepted: Whether the trigger was accepted.
        event_id: The trigger's event ID.
        reason: Why it was rejected.
        message_id: ID of the appended user message.
        run_id: ID of the started run, if the agent kind runs jobs.
    """

    accepted: bool
    event_id: str
    reason: str | None = None
    message_id: str | None = None
    run_id: str | None = None
