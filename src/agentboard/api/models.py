"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from agentboard.board.models import Column, MoveType
from agentboard.triggers.models import AgentKind

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Trigger models


class TriggerCreate(BaseModel):
    """Request model for a user action.

    event_id should be assigned where the action happens (one per click);
    a fresh one is generated if it is missing.
    """

    agent_kind: AgentKind
    content: str = Field(..., min_length=1, max_length=20_000)
    event_id: str | None = Field(default=None, min_length=1, max_length=128)


class TriggerResponse(BaseModel):
    """Response model for a dispatched trigger."""

    accepted: bool
    event_id: str
    reason: str | None = None
    message_id: str | None = None
    run_id: str | None = None


def dispatch_to_response(result: Any) -> TriggerResponse:
    """Convert a DispatchResult to TriggerResponse."""
    return TriggerResponse.model_validate(result, from_attributes=True)


# Run models


class RunResponse(BaseModel):
    """Response model for an in-flight run."""

    run_id: str
    agent_kind: str
    trigger_event_id: str
    content: str
    stage: str
    started_at: datetime
    ticket_id: str | None
    job_id: str | None
    outcome: str | None
    report: str | None
    verdict: str | None
    finished_at: datetime | None
    diagnostics: list[str]


def run_to_response(run: Any) -> RunResponse:
    """Convert an AgentRun to RunResponse."""
    return RunResponse.model_validate(run.to_dict())


# Conversation models


class MessageResponse(BaseModel):
    """Response model for a conversation message."""

    id: str
    agent_kind: str
    label: str
    content: str
    run_id: str | None
    created_at: datetime
    metadata: dict[str, Any]


def message_to_response(message: Any) -> MessageResponse:
    """Convert a Message to MessageResponse."""
    return MessageResponse.model_validate(message.to_dict())


# Ticket models


class TicketResponse(BaseModel):
    """Response model for a ticket."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    column_id: str | None
    position: int
    moved_at: datetime | None
    body: str


def ticket_to_response(ticket: Any) -> TicketResponse:
    """Convert a Ticket to TicketResponse."""
    return TicketResponse.model_validate(ticket)


class MoveRequest(BaseModel):
    """Request model for moving a ticket by hand."""

    from_column: Column | None = None
    to_column: Column
    move_type: MoveType = MoveType.FORWARD


class MoveResponse(BaseModel):
    """Response model for a move attempt."""

    applied: bool
    reason: str | None = None
    ticket: TicketResponse | None = None


# Diagnostics models


class DiagnosticsResponse(BaseModel):
    """Response model for the diagnostics snapshot."""

    last_trigger: dict[str, Any] | None
    orphaned_completions: list[dict[str, Any]]
    unapplied_moves: list[dict[str, Any]]
    active_runs: list[str]
