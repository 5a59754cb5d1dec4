"""Diagnostics - last trigger, orphaned completions and unapplied moves."""

from agentboard.diagnostics.models import OrphanedCompletion, TriggerRecord, UnappliedMove
from agentboard.diagnostics.sink import Diagnostics

__all__ = [
    "Diagnostics",
    "OrphanedCompletion",
    "TriggerRecord",
    "UnappliedMove",
]
