"""Triggers - user actions, agent kinds and duplicate suppression."""

from agentboard.triggers.deduplicator import TriggerDeduplicator
from agentboard.triggers.models import AgentKind, TriggerDecision, TriggerEvent, new_event_id
from agentboard.triggers.parsing import extract_ticket_id, trigger_signature, usage_hint

__all__ = [
    "AgentKind",
    "TriggerDecision",
    "TriggerDeduplicator",
    "TriggerEvent",
    "extract_ticket_id",
    "new_event_id",
    "trigger_signature",
    "usage_hint",
]
