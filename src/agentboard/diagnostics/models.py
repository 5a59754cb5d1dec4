"""Records kept by the diagnostics sink."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass
class TriggerRecord:
    """The most recently accepted trigger."""

    event_id: str
    timestamp: datetime
    agent_kind: str
    content: str


@dataclass
class UnappliedMove:
    """A column move that was attempted but not written."""

    ticket_id: str
    from_column: str | None
    to_column: str
    move_type: str
    reason: str
    store_error: bool = False
    recorded_at: datetime = field(default_factory=_now)


@dataclass
class OrphanedCompletion:
    """A terminal run payload whose conversation could not be determined."""

    run_id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    recorded_at: datetime = field(default_factory=_now)


def to_dict(record: Any) -> dict[str, Any]:
    """Convert a record to a JSON-friendly dict."""
    data = asdict(record)
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = value.isoformat()
    return data
