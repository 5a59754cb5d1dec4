"""Data models for the board: columns, move types and tickets."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003 - used at runtime by dataclasses
from enum import StrEnum


class Column(StrEnum):
    """Board columns, in pipeline order."""

    UNASSIGNED = "col-unassigned"
    TODO = "col-todo"
    DOING = "col-doing"
    QA = "col-qa"
    HUMAN_IN_THE_LOOP = "col-human-in-the-loop"

    @property
    def title(self) -> str:
        """Display title of the column."""
        return COLUMN_TITLES[self]


COLUMN_TITLES = {
    Column.UNASSIGNED: "Unassigned",
    Column.TODO: "To-do",
    Column.DOING: "Doing",
    Column.QA: "Ready for QA",
    Column.HUMAN_IN_THE_LOOP: "Human in the Loop",
}

PIPELINE_ORDER = tuple(Column)


class MoveType(StrEnum):
    """Kind of move requested from the column state machine."""

    START = "start"
    FORWARD = "forward"
    QA_FAIL = "qa_fail"


# Every permitted (source, destination) pair, per move type. QA_FAIL holds the
# only backward moves in the pipeline; adding another one belongs here.
ALLOWED_TRANSITIONS: dict[MoveType, frozenset[tuple[Column, Column]]] = {
    MoveType.START: frozenset(
        {
            (Column.UNASSIGNED, Column.TODO),
            (Column.UNASSIGNED, Column.DOING),
        }
    ),
    MoveType.FORWARD: frozenset(
        {
            (Column.TODO, Column.DOING),
            (Column.DOING, Column.QA),
            (Column.QA, Column.DOING),
            (Column.DOING, Column.HUMAN_IN_THE_LOOP),
            (Column.QA, Column.HUMAN_IN_THE_LOOP),
        }
    ),
    MoveType.QA_FAIL: frozenset(
        {
            (Column.DOING, Column.TODO),
            (Column.QA, Column.TODO),
        }
    ),
}


@dataclass
class Ticket:
    """A ticket on the board.

    Attributes:
        id: Display ID of the ticket (e.g. "0071").
        column_id: Current column ID. May be None or empty for unplaced tickets.
        position: Position within the column (1-based).
        body: Markdown body, opaque except for its metadata header.
        moved_at: When the ticket last changed column.
        title: Human-readable title.
    """

    id: str
    column_id: str | None
    position: int
    body: str = ""
    moved_at: datetime | None = None
    title: str = ""


@dataclass
class MoveResult:
    """Outcome of a single attempt_move call.

    Attributes:
        applied: Whether the move was written.
        reason: Why the move was not applied.
        ticket: The ticket after the move (or as last read, if not applied).
        store_error: True when the store itself failed.
    """

    applied: bool
    reason: str | None = None
    ticket: Ticket | None = None
    store_error: bool = False
