"""Orchestrator package - run lifecycle, polling and dispatch."""

from agentboard.orchestrator.dispatch import Dispatcher
from agentboard.orchestrator.exceptions import (
    DispatchError,
    OrchestratorError,
    PreconditionError,
    RunTimeoutError,
    ValidationError,
    VerdictMissingError,
)
from agentboard.orchestrator.models import (
    AgentRun,
    DispatchResult,
    PollPolicy,
    RunOutcome,
    RunStage,
    StageEvent,
)
from agentboard.orchestrator.orchestrator import RunOrchestrator
from agentboard.orchestrator.poller import poll_until_terminal

__all__ = [
    "AgentRun",
    "DispatchError",
    "DispatchResult",
    "Dispatcher",
    "OrchestratorError",
    "PollPolicy",
    "PreconditionError",
    "RunOrchestrator",
    "RunStage",
    "RunOutcome",
    "RunTimeoutError",
    "StageEvent",
    "ValidationError",
    "VerdictMissingError",
    "poll_until_terminal",
]
