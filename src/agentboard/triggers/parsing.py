"""Extract target ticket IDs from trigger content."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from agentboard.triggers.models import AgentKind

if TYPE_CHECKING:
    from agentboard.triggers.models import TriggerEvent

TICKET_PATTERNS: dict[AgentKind, re.Pattern[str]] = {
    AgentKind.IMPLEMENTATION: re.compile(r"implement\s+ticket\s+(\d{4})", re.IGNORECASE),
    AgentKind.QA: re.compile(r"qa\s+ticket\s+(\d{4})", re.IGNORECASE),
}

USAGE_HINTS = {
    AgentKind.IMPLEMENTATION: 'Say "Implement ticket NNNN" (e.g. Implement ticket 0046).',
    AgentKind.QA: 'Say "QA ticket NNNN" (e.g. QA ticket 0046).',
}


def extract_ticket_id(agent_kind: AgentKind, content: str) -> str | None:
    """Return the four-digit ticket ID a trigger targets, or None."""
    pattern = TICKET_PATTERNS.get(agent_kind)
    if pattern is None:
        return None
    match = pattern.search(content)
    return match.group(1) if match else None


def trigger_signature(trigger: TriggerEvent) -> tuple[str, str]:
    """Key under which identical triggers are suppressed.

    Runnable kinds are keyed on the ticket they target, so two phrasings of
    the same request collide. Anything else, or content naming no ticket, is
    keyed on its whitespace/case-normalized content.
    """
    ticket_id = extract_ticket_id(trigger.agent_kind, trigger.content)
    if ticket_id is not None:
        return (trigger.agent_kind.value, f"ticket:{ticket_id}")
    return (trigger.agent_kind.value, " ".join(trigger.content.lower().split()))


def usage_hint(agent_kind: AgentKind) -> str:
    """User-facing hint shown when trigger content cannot be parsed."""
    return USAGE_HINTS.get(agent_kind, "Could not determine a target ticket.")
