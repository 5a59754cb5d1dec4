"""Unit tests for AgentRun and run stages."""

import pytest

from agentboard.orchestrator import AgentRun, RunOutcome, RunStage
from agentboard.triggers import AgentKind, TriggerEvent


@pytest.fixture
def run() -> AgentRun:
    return AgentRun.from_trigger(
        TriggerEvent(event_id="work-btn-1-a", agent_kind=AgentKind.QA, content="QA ticket 0099")
    )


@pytest.mark.unit
class TestAgentRun:
    """Tests for AgentRun."""

    def test_from_trigger(self, run: AgentRun) -> None:
        assert run.run_id.startswith("run-")
        assert run.agent_kind is AgentKind.QA
        assert run.trigger_event_id == "work-btn-1-a"
        assert run.stage is RunStage.PREPARING
        assert not run.is_terminal

    def test_advance_forward(self, run: AgentRun) -> None:
        run.advance(RunStage.FETCHING_TICKET)
        run.advance(RunStage.POLLING)
        run.advance(RunStage.POLLING)

        assert run.stage is RunStage.POLLING

    def test_advance_backward_raises(self, run: AgentRun) -> None:
        run.advance(RunStage.LAUNCHING)

        with pytest.raises(ValueError, match="cannot go back"):
            run.advance(RunStage.FETCHING_TICKET)

    def test_terminal_is_final(self, run: AgentRun) -> None:
        run.advance(RunStage.FAILED)

        assert run.is_terminal
        assert run.finished_at is not None
        with pytest.raises(ValueError, match="already ended"):
            run.advance(RunStage.COMPLETED)

    def test_any_stage_can_fail(self, run: AgentRun) -> None:
        run.advance(RunStage.PREPARING)
        run.advance(RunStage.FAILED)

        assert run.stage is RunStage.FAILED

    def test_sequence_increases(self, run: AgentRun) -> None:
        assert [run.next_sequence() for _ in range(3)] == [1, 2, 3]

    def test_to_dict(self, run: AgentRun) -> None:
        run.outcome = RunOutcome.PASS

        data = run.to_dict()

        assert data["agent_kind"] == "qa-agent"
        assert data["stage"] == "preparing"
        assert data["outcome"] == "pass"
        assert data["finished_at"] is None


@pytest.mark.unit
class TestRunStage:
    """Tests for RunStage ordering."""

    def test_terminal_stages(self) -> None:
        assert {s for s in RunStage if s.is_terminal} == {RunStage.COMPLETED, RunStage.FAILED}

    def test_order(self) -> None:
        assert RunStage.PREPARING.order < RunStage.POLLING.order < RunStage.COMPLETED.order
        assert RunStage.FAILED.order == RunStage.COMPLETED.order
