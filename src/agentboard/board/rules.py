"""Which column moves runs make before and after they execute."""

from __future__ import annotations

from dataclasses import dataclass

from agentboard.board.models import Column, MoveType
from agentboard.triggers.models import AgentKind
from agentboard.verdict.models import VerdictOutcome


@dataclass(frozen=True)
class PlannedMove:
    """A move a run wants to make, checked later by the state machine."""

    from_column: Column
    to_column: Column
    move_type: MoveType


PRE_RUN_MOVES = {
    AgentKind.IMPLEMENTATION: PlannedMove(Column.TODO, Column.DOING, MoveType.FORWARD),
    AgentKind.QA: PlannedMove(Column.QA, Column.DOING, MoveType.FORWARD),
}

POST_RUN_MOVES = {
    (AgentKind.QA, VerdictOutcome.PASS): PlannedMove(
        Column.DOING, Column.HUMAN_IN_THE_LOOP, MoveType.FORWARD
    ),
    (AgentKind.QA, VerdictOutcome.FAIL): PlannedMove(
        Column.DOING, Column.TODO, MoveType.QA_FAIL
    ),
}


def pre_run_move(agent_kind: AgentKind) -> PlannedMove | None:
    """Move applied while resolving a run's target, if any."""
    return PRE_RUN_MOVES.get(agent_kind)


def post_run_move(agent_kind: AgentKind, outcome: VerdictOutcome) -> PlannedMove | None:
    """Move applied after a completed run with the given verdict, if any.

    Implementation runs never move their ticket after completion.
    """
    return POST_RUN_MOVES.get((agent_kind, outcome))
