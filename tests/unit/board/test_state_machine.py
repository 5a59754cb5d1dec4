"""Unit tests for ColumnStateMachine."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from agentboard.board import (
    Column,
    ColumnStateMachine,
    MoveType,
    StoreError,
    StoreWriteError,
    Ticket,
    TicketNotFoundError,
)
from agentboard.board.frontmatter import parse_header
from agentboard.diagnostics import Diagnostics

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class InMemoryStore:
    """Dict-backed TicketStore."""

    def __init__(self, tickets: list[Ticket] | None = None) -> None:
        self.tickets = {t.id: t for t in tickets or []}
        self.lock = threading.Lock()
        self.writes = 0

    def get_ticket(self, ticket_id: str) -> Ticket:
        if ticket_id not in self.tickets:
            raise TicketNotFoundError(ticket_id)
        return self.tickets[ticket_id]

    def max_position(self, column_id: str) -> int:
        positions = [t.position for t in self.tickets.values() if t.column_id == column_id]
        return max(positions, default=0)

    def compare_and_move(self, ticket_id, expected_column, column_id, position, moved_at, body=None):
        with self.lock:
            ticket = self.tickets[ticket_id]
            if ticket.column_id != expected_column:
                return False
            self.tickets[ticket_id] = replace(
                ticket,
                column_id=column_id,
                position=position,
                moved_at=moved_at,
                body=body if body is not None else ticket.body,
            )
            self.writes += 1
            return True


def ticket(ticket_id: str, column: Column | None, position: int = 1, **kwargs) -> Ticket:
    return Ticket(
        id=ticket_id,
        column_id=column.value if column else None,
        position=position,
        **kwargs,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(
        [
            ticket("0099", Column.QA, 1),
            ticket("0100", Column.TODO, 1),
            ticket("0101", Column.HUMAN_IN_THE_LOOP, 1),
            ticket("0102", Column.HUMAN_IN_THE_LOOP, 2),
            ticket("0103", None, 0),
        ]
    )


@pytest.fixture
def machine(store: InMemoryStore, diagnostics: Diagnostics) -> ColumnStateMachine:
    return ColumnStateMachine(store, diagnostics=diagnostics, clock=lambda: NOW)


@pytest.mark.unit
class TestAppliedMoves:
    """Moves that are permitted and whose precondition holds."""

    def test_forward_move_appends_to_destination(
        self, machine: ColumnStateMachine, store: InMemoryStore
    ) -> None:
        """QA -> HumanInLoop lands at max + 1 with moved_at updated."""
        result = machine.attempt_move("0099", Column.QA, Column.HUMAN_IN_THE_LOOP)

        assert result.applied
        assert result.reason is None
        moved = store.tickets["0099"]
        assert moved.column_id == Column.HUMAN_IN_THE_LOOP.value
        assert moved.position == 3
        assert moved.moved_at == NOW
        assert result.ticket == moved

    def test_empty_destination_gets_position_one(
        self, machine: ColumnStateMachine, store: InMemoryStore
    ) -> None:
        """The first ticket in a column is at position 1."""
        result = machine.attempt_move("0100", Column.TODO, Column.DOING)

        assert result.applied
        assert store.tickets["0100"].position == 1

    def test_qa_fail_moves_backward(self, machine: ColumnStateMachine, store: InMemoryStore) -> None:
        """Doing -> ToDo is allowed as a qa_fail move."""
        machine.attempt_move("0099", Column.QA, Column.DOING)

        result = machine.attempt_move("0099", Column.DOING, Column.TODO, MoveType.QA_FAIL)

        assert result.applied
        assert store.tickets["0099"].column_id == Column.TODO.value
        assert store.tickets["0099"].position == 2

    @pytest.mark.parametrize("constraint", [None, "", Column.UNASSIGNED])
    def test_start_move_from_unplaced(
        self, machine: ColumnStateMachine, store: InMemoryStore, constraint
    ) -> None:
        """None, empty and Unassigned are the same source for start moves."""
        result = machine.attempt_move("0103", constraint, Column.TODO, MoveType.START)

        assert result.applied
        assert store.tickets["0103"].column_id == Column.TODO.value

    def test_positions_are_one_to_n(self, store: InMemoryStore) -> None:
        """N moves into one column give positions 1..N without duplicates."""
        for n in range(5):
            store.tickets[f"05{n:02d}"] = ticket(f"05{n:02d}", Column.QA, n + 1)
        machine = ColumnStateMachine(store, clock=lambda: NOW)

        for n in (3, 0, 4, 1, 2):
            assert machine.attempt_move(f"05{n:02d}", Column.QA, Column.DOING).applied

        positions = sorted(
            t.position for t in store.tickets.values() if t.column_id == Column.DOING.value
        )
        assert positions == [1, 2, 3, 4, 5]

    def test_moved_at_never_goes_backward(self, store: InMemoryStore) -> None:
        """A clock behind the last move time keeps the previous time."""
        later = NOW + timedelta(hours=1)
        store.tickets["0099"] = ticket("0099", Column.QA, moved_at=later)
        machine = ColumnStateMachine(store, clock=lambda: NOW)

        machine.attempt_move("0099", Column.QA, Column.DOING)

        assert store.tickets["0099"].moved_at == later

    def test_header_is_rewritten(self, store: InMemoryStore, make_body) -> None:
        """The metadata header follows the move; other keys are kept."""
        body = make_body("0099", Column.QA.value).replace("---\n\n", "owner: pm\n---\n\n", 1)
        store.tickets["0099"] = ticket("0099", Column.QA, body=body)
        machine = ColumnStateMachine(store, clock=lambda: NOW)

        machine.attempt_move("0099", Column.QA, Column.HUMAN_IN_THE_LOOP)

        fields, rest = parse_header(store.tickets["0099"].body)
        assert fields is not None
        assert fields["kanbanColumnId"] == Column.HUMAN_IN_THE_LOOP.value
        assert fields["kanbanPosition"] == "3"
        assert fields["kanbanMovedAt"] == NOW.isoformat()
        assert fields["owner"] == "pm"
        assert rest.startswith("# Ticket 0099")


@pytest.mark.unit
class TestRejectedMoves:
    """Moves that must leave the ticket untouched."""

    def test_wrong_source_column_is_noop(
        self, machine: ColumnStateMachine, store: InMemoryStore, diagnostics: Diagnostics
    ) -> None:
        """A ticket not in the expected column is not moved."""
        before = store.tickets["0100"]

        result = machine.attempt_move("0100", Column.QA, Column.DOING)

        assert not result.applied
        assert "expected col-qa" in (result.reason or "")
        assert store.tickets["0100"] == before
        assert store.writes == 0
        assert diagnostics.unapplied_moves[-1].ticket_id == "0100"

    def test_transition_not_in_table(self, machine: ColumnStateMachine, store: InMemoryStore) -> None:
        """HumanInLoop -> ToDo is not permitted for any move type."""
        for move_type in MoveType:
            result = machine.attempt_move(
                "0101", Column.HUMAN_IN_THE_LOOP, Column.TODO, move_type
            )
            assert not result.applied
            assert "not permitted" in (result.reason or "")
        assert store.writes == 0

    def test_backward_move_needs_qa_fail(self, machine: ColumnStateMachine) -> None:
        """Doing -> ToDo as a forward move is rejected."""
        machine.attempt_move("0100", Column.TODO, Column.DOING)

        result = machine.attempt_move("0100", Column.DOING, Column.TODO, MoveType.FORWARD)

        assert not result.applied

    def test_unplaced_source_only_for_start(self, machine: ColumnStateMachine) -> None:
        """A forward move from no column is rejected."""
        result = machine.attempt_move("0103", None, Column.TODO, MoveType.FORWARD)

        assert not result.applied

    def test_missing_ticket(self, machine: ColumnStateMachine) -> None:
        """A missing ticket is reported, not raised."""
        result = machine.attempt_move("9999", Column.QA, Column.DOING)

        assert not result.applied
        assert not result.store_error
        assert "not found" in (result.reason or "")

    def test_read_failure_is_store_error(self, diagnostics: Diagnostics) -> None:
        """Store failures are distinct from a missing ticket."""
        failing = MagicMock()
        failing.get_ticket.side_effect = StoreError("database is locked")
        machine = ColumnStateMachine(failing, diagnostics=diagnostics)

        result = machine.attempt_move("0099", Column.QA, Column.DOING)

        assert not result.applied
        assert result.store_error
        assert diagnostics.unapplied_moves[-1].store_error

    def test_write_failure_is_not_applied(self, store: InMemoryStore) -> None:
        """A failing write leaves the move not applied."""
        wrapped = MagicMock(wraps=store)
        wrapped.compare_and_move.side_effect = StoreWriteError("disk full")
        machine = ColumnStateMachine(wrapped, clock=lambda: NOW)

        result = machine.attempt_move("0099", Column.QA, Column.DOING)

        assert not result.applied
        assert result.store_error
        assert store.tickets["0099"].column_id == Column.QA.value

    def test_column_changed_before_write(self, store: InMemoryStore) -> None:
        """A lost compare-and-set is a no-op, never an overwrite."""
        wrapped = MagicMock(wraps=store)
        wrapped.compare_and_move.return_value = False
        machine = ColumnStateMachine(wrapped, clock=lambda: NOW)

        result = machine.attempt_move("0099", Column.QA, Column.DOING)

        assert not result.applied
        assert "changed column" in (result.reason or "")


@pytest.mark.unit
class TestConcurrentMoves:
    """attempt_move called from several threads."""

    def test_racing_moves_of_one_ticket(self, machine: ColumnStateMachine, store: InMemoryStore) -> None:
        """Of two moves out of the same column, exactly one is applied."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(
                pool.map(
                    lambda args: machine.attempt_move(*args),
                    [
                        ("0099", Column.QA, Column.HUMAN_IN_THE_LOOP, MoveType.FORWARD),
                        ("0099", Column.QA, Column.TODO, MoveType.QA_FAIL),
                    ],
                )
            )

        assert sum(r.applied for r in results) == 1
        assert store.writes == 1

    def test_different_tickets_move_independently(self, store: InMemoryStore) -> None:
        """Concurrent moves of different tickets all apply with distinct positions."""
        for n in range(10):
            store.tickets[f"06{n:02d}"] = ticket(f"06{n:02d}", Column.TODO, n + 1)
        machine = ColumnStateMachine(store, clock=lambda: NOW)

        with ThreadPoolExecutor(max_workers=10) as pool:
            results = list(
                pool.map(
                    lambda n: machine.attempt_move(f"06{n:02d}", Column.TODO, Column.DOING),
                    range(10),
                )
            )

        assert all(r.applied for r in results)
        assert sorted(r.ticket.position for r in results if r.ticket) == list(range(1, 11))

    def test_locks_are_dropped_once_released(self, store: InMemoryStore) -> None:
        """Moves of many distinct tickets leave no per-ticket locks behind."""
        for n in range(50):
            store.tickets[f"07{n:02d}"] = ticket(f"07{n:02d}", Column.TODO, n + 1)
        machine = ColumnStateMachine(store, clock=lambda: NOW)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(
                pool.map(
                    lambda n: machine.attempt_move(f"07{n:02d}", Column.TODO, Column.DOING),
                    range(50),
                )
            )
        machine.attempt_move("0799", Column.TODO, Column.DOING)

        assert all(r.applied for r in results)
        assert machine._locks == {}
