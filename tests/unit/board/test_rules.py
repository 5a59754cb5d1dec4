"""Unit tests for the run move rules."""

import pytest

from agentboard.board import ALLOWED_TRANSITIONS, Column, MoveType, post_run_move, pre_run_move
from agentboard.triggers import AgentKind
from agentboard.verdict import VerdictOutcome


@pytest.mark.unit
class TestRunMoves:
    """Pre- and post-run moves per agent kind."""

    def test_implementation_starts_work(self) -> None:
        move = pre_run_move(AgentKind.IMPLEMENTATION)

        assert move is not None
        assert (move.from_column, move.to_column) == (Column.TODO, Column.DOING)

    def test_qa_takes_ticket_into_doing(self) -> None:
        move = pre_run_move(AgentKind.QA)

        assert move is not None
        assert (move.from_column, move.to_column) == (Column.QA, Column.DOING)

    def test_qa_pass_goes_to_human_in_the_loop(self) -> None:
        move = post_run_move(AgentKind.QA, VerdictOutcome.PASS)

        assert move is not None
        assert move.to_column is Column.HUMAN_IN_THE_LOOP
        assert move.move_type is MoveType.FORWARD

    def test_qa_fail_goes_back_to_todo(self) -> None:
        move = post_run_move(AgentKind.QA, VerdictOutcome.FAIL)

        assert move is not None
        assert move.to_column is Column.TODO
        assert move.move_type is MoveType.QA_FAIL

    @pytest.mark.parametrize("outcome", list(VerdictOutcome))
    def test_implementation_never_moves_after_run(self, outcome: VerdictOutcome) -> None:
        assert post_run_move(AgentKind.IMPLEMENTATION, outcome) is None

    def test_unknown_verdict_does_not_move(self) -> None:
        assert post_run_move(AgentKind.QA, VerdictOutcome.UNKNOWN) is None

    @pytest.mark.parametrize("kind", [AgentKind.PROJECT_MANAGER, AgentKind.STANDUP])
    def test_non_runnable_kinds_have_no_moves(self, kind: AgentKind) -> None:
        assert pre_run_move(kind) is None
        assert post_run_move(kind, VerdictOutcome.PASS) is None

    def test_all_planned_moves_are_permitted(self) -> None:
        """Every planned move is in the transition table."""
        moves = [pre_run_move(AgentKind.IMPLEMENTATION), pre_run_move(AgentKind.QA)]
        moves += [post_run_move(AgentKind.QA, o) for o in (VerdictOutcome.PASS, VerdictOutcome.FAIL)]

        for move in moves:
            assert move is not None
            assert (move.from_column, move.to_column) in ALLOWED_TRANSITIONS[move.move_type]
