"""Exceptions for the Orchestrator module."""


class OrchestratorError(Exception):
    """Base exception for orchestrator errors."""


class ValidationError(OrchestratorError):
    """The trigger cannot be turned into a run (unparseable content, missing ticket)."""


class PreconditionError(OrchestratorError):
    """The ticket is not in the column a move expects. Never escalated."""


class RunTimeoutError(OrchestratorError, TimeoutError):
    """Polling exceeded the run's wall-clock budget."""


class VerdictMissingError(OrchestratorError):
    """A completed run produced no usable verdict. Not a hard failure."""


class DispatchError(OrchestratorError):
    """A run could not be found or controlled by the dispatcher."""
