"""Diagnostics sink - human-readable records of orchestration side channels."""

from __future__ import annotations

from collections import deque
from datetime import UTC, datetime
from typing import Any

from agentboard.diagnostics.models import (
    OrphanedCompletion,
    TriggerRecord,
    UnappliedMove,
    to_dict,
)
from agentboard.logging import get_logger, truncate_output

logger = get_logger("diagnostics")

DEFAULT_MAX_RECORDS = 100


class Diagnostics:
    """Collects diagnostics that must stay observable outside the conversation logs.

    Records:
    - the last accepted trigger (event id, time, agent kind)
    - orphaned completion payloads (terminal events with no known conversation)
    - moves that were attempted but not applied, with the reason

    Orphaned completions are kept for the life of the process; only the
    unapplied-move history is bounded by max_records.
    """

    def __init__(self, max_records: int = DEFAULT_MAX_RECORDS) -> None:
        self._last_trigger: TriggerRecord | None = None
        self._orphans: list[OrphanedCompletion] = []
        self._unapplied: deque[UnappliedMove] = deque(maxlen=max_records)

    def record_trigger(
        self,
        event_id: str,
        agent_kind: str,
        content: str,
        timestamp: datetime | None = None,
    ) -> TriggerRecord:
        """Remember the most recently accepted trigger."""
        record = TriggerRecord(
            event_id=event_id,
            timestamp=timestamp or datetime.now(UTC),
            agent_kind=agent_kind,
            content=content,
        )
        self._last_trigger = record
        logger.info("Accepted trigger %s for %s", event_id, agent_kind)
        return record

    @property
    def last_trigger(self) -> TriggerRecord | None:
        """The most recently accepted trigger, if any."""
        return self._last_trigger

    def record_orphan(
        self, run_id: str, content: str, metadata: dict[str, Any] | None = None
    ) -> OrphanedCompletion:
        """Retain a terminal payload that could not be routed to a conversation."""
        orphan = OrphanedCompletion(run_id=run_id, content=content, metadata=metadata or {})
        self._orphans.append(orphan)
        logger.warning(
            "Orphaned completion for run %s (%s): %s",
            run_id,
            orphan.metadata,
            truncate_output(content),
        )
        return orphan

    @property
    def orphaned_completions(self) -> list[OrphanedCompletion]:
        """Orphaned completion payloads, oldest first."""
        return list(self._orphans)

    def record_unapplied_move(
        self,
        ticket_id: str,
        from_column: str | None,
        to_column: str,
        move_type: str,
        reason: str,
        store_error: bool = False,
    ) -> UnappliedMove:
        """Record a move that was attempted but not applied."""
        move = UnappliedMove(
            ticket_id=ticket_id,
            from_column=from_column,
            to_column=to_column,
            move_type=move_type,
            reason=reason,
            store_error=store_error,
        )
        self._unapplied.append(move)
        log = logger.error if store_error else logger.info
        log(
            "Move of ticket %s %s -> %s not applied: %s",
            ticket_id,
            from_column,
            to_column,
            reason,
        )
        return move

    @property
    def unapplied_moves(self) -> list[UnappliedMove]:
        """Unapplied moves, oldest first."""
        return list(self._unapplied)

    def snapshot(self) -> dict[str, Any]:
        """JSON-friendly view of everything recorded."""
        return {
            "last_trigger": to_dict(self._last_trigger) if self._last_trigger else None,
            "orphaned_completions": [to_dict(o) for o in self._orphans],
            "unapplied_moves": [to_dict(m) for m in self._unapplied],
        }
