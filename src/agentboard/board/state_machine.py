"""ColumnStateMachine - the single entry point for ticket column moves."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from agentboard.board.exceptions import StoreError, TicketNotFoundError
from agentboard.board.frontmatter import rewrite_kanban_header
from agentboard.board.models import ALLOWED_TRANSITIONS, Column, MoveResult, MoveType
from agentboard.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from agentboard.board.models import Ticket
    from agentboard.board.store import TicketStore
    from agentboard.diagnostics import Diagnostics

logger = get_logger("board")

# Column values that count as "not placed yet" for START moves
_UNPLACED = {None, "", Column.UNASSIGNED.value}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ColumnStateMachine:
    """Applies legal column moves to tickets.

    A move is written only if the ticket is still in the expected source
    column when it is re-read right before the write, and the write itself is
    a compare-and-set on that column. A mismatch is a no-op, never a forced
    move. Destination positions are always max + 1 of the destination column,
    computed while holding a lock on that column.
    """

    def __init__(
        self,
        store: TicketStore,
        diagnostics: Diagnostics | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the state machine.

        Args:
            store: Ticket store to read from and write to.
            diagnostics: Optional sink for moves that were not applied.
            clock: Source of the current time (UTC).
        """
        self._store = store
        self._diagnostics = diagnostics
        self._clock = clock
        # key -> (lock, holders); an entry lives only while someone holds or waits on it
        self._locks: dict[str, tuple[threading.Lock, int]] = {}
        self._locks_guard = threading.Lock()

    def attempt_move(
        self,
        ticket_id: str,
        from_constraint: Column | str | None,
        to_column: Column | str,
        move_type: MoveType = MoveType.FORWARD,
    ) -> MoveResult:
        """Move a ticket to the end of to_column if it is in from_constraint.

        Args:
            ticket_id: Ticket to move.
            from_constraint: Column the ticket must currently be in. For START
                moves, None, empty and Unassigned are equivalent.
            to_column: Destination column.
            move_type: Which transition table to check the move against.

        Returns:
            MoveResult. applied is False (with a reason) for any rejected,
            stale or failed move; the ticket's previous column stays authoritative.
        """
        source = self._source_column(from_constraint, move_type)
        destination = Column(to_column)

        if source is None or (source, destination) not in ALLOWED_TRANSITIONS[move_type]:
            return self._not_applied(
                ticket_id,
                from_constraint,
                destination,
                move_type,
                f"{move_type.value} move from {from_constraint or 'unplaced'} "
                f"to {destination.value} is not permitted",
            )

        # Ticket lock first, then the destination column lock
        with self._locked(f"ticket:{ticket_id}"), self._locked(f"column:{destination.value}"):
            return self._move_locked(ticket_id, source, destination, move_type)

    def _move_locked(
        self,
        ticket_id: str,
        source: Column,
        destination: Column,
        move_type: MoveType,
    ) -> MoveResult:
        try:
            ticket = self._store.get_ticket(ticket_id)
        except TicketNotFoundError:
            return self._not_applied(
                ticket_id, source, destination, move_type, f"Ticket {ticket_id} not found"
            )
        except StoreError as e:
            return self._not_applied(
                ticket_id, source, destination, move_type, str(e), store_error=True
            )

        if not self._in_column(ticket.column_id, source, move_type):
            return self._not_applied(
                ticket_id,
                source,
                destination,
                move_type,
                f"Ticket {ticket_id} is in {ticket.column_id or 'no column'}, "
                f"expected {source.value}",
                ticket=ticket,
            )

        moved_at = self._clock()
        if ticket.moved_at is not None and moved_at < ticket.moved_at:
            moved_at = ticket.moved_at

        try:
            position = self._store.max_position(destination.value) + 1
            body = rewrite_kanban_header(ticket.body, destination.value, position, moved_at)
            written = self._store.compare_and_move(
                ticket_id,
                expected_column=ticket.column_id,
                column_id=destination.value,
                position=position,
                moved_at=moved_at,
                body=body if body != ticket.body else None,
            )
        except StoreError as e:
            return self._not_applied(
                ticket_id, source, destination, move_type, str(e), ticket=ticket, store_error=True
            )

        if not written:
            return self._not_applied(
                ticket_id,
                source,
                destination,
                move_type,
                f"Ticket {ticket_id} changed column during the move",
                ticket=ticket,
            )

        moved = replace(
            ticket,
            column_id=destination.value,
            position=position,
            moved_at=moved_at,
            body=body,
        )
        logger.info(
            "Moved ticket %s from %s to %s (position %d)",
            ticket_id,
            ticket.column_id,
            destination.value,
            position,
        )
        return MoveResult(applied=True, ticket=moved)

    @staticmethod
    def _source_column(from_constraint: Column | str | None, move_type: MoveType) -> Column | None:
        if move_type is MoveType.START and from_constraint in _UNPLACED:
            return Column.UNASSIGNED
        try:
            return Column(from_constraint)
        except ValueError:
            return None

    @staticmethod
    def _in_column(current: str | None, source: Column, move_type: MoveType) -> bool:
        if move_type is MoveType.START and source is Column.UNASSIGNED:
            return current in _UNPLACED
        return current == source.value

    @contextmanager
    def _locked(self, key: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.get(key)
            lock = entry[0] if entry else threading.Lock()
            self._locks[key] = (lock, (entry[1] if entry else 0) + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                _, holders = self._locks[key]
                if holders == 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, holders - 1)

    def _not_applied(
        self,
        ticket_id: str,
        source: Column | str | None,
        destination: Column,
        move_type: MoveType,
        reason: str,
        ticket: Ticket | None = None,
        store_error: bool = False,
    ) -> MoveResult:
        if self._diagnostics is not None:
            self._diagnostics.record_unapplied_move(
                ticket_id=ticket_id,
                from_column=str(source) if source is not None else None,
                to_column=destination.value,
                move_type=move_type.value,
                reason=reason,
                store_error=store_error,
            )
        else:
            logger.info("Move of ticket %s not applied: %s", ticket_id, reason)
        return MoveResult(applied=False, reason=reason, ticket=ticket, store_error=store_error)
