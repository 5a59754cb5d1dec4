"""Unit tests for job instructions and job specs."""

import pytest

from agentboard.board import Ticket
from agentboard.runtime import build_instructions, build_job_spec
from agentboard.runtime.prompts import NOT_SPECIFIED, ticket_section
from agentboard.triggers import AgentKind


@pytest.fixture
def qa_ticket(make_body) -> Ticket:
    return Ticket(id="0099", column_id="col-qa", position=1, body=make_body(), title="Board view")


@pytest.mark.unit
class TestTicketSection:
    """Tests for ticket_section."""

    def test_extracts_section(self, make_body) -> None:
        assert ticket_section(make_body(), "Goal") == "Show the board."
        assert ticket_section(make_body(), "Acceptance criteria") == "- [ ] Columns render"

    def test_missing_section(self) -> None:
        assert ticket_section("# Ticket\n", "Goal") == ""


@pytest.mark.unit
class TestBuildInstructions:
    """Tests for build_instructions."""

    def test_qa_instructions_require_verdict_line(self, qa_ticket: Ticket) -> None:
        text = build_instructions(AgentKind.QA, qa_ticket)

        assert "**Ticket**: 0099 - Board view" in text
        assert "## Verdict" in text
        assert "RESULT: PASS — 0099" in text
        assert "RESULT: FAIL — 0099" in text
        assert "Show the board." in text

    def test_implementation_instructions(self, qa_ticket: Ticket) -> None:
        text = build_instructions(AgentKind.IMPLEMENTATION, qa_ticket)

        assert "**Branch**: ticket/0099-implementation" in text
        assert "RESULT:" not in text

    def test_missing_sections_are_marked(self) -> None:
        ticket = Ticket(id="0042", column_id="col-todo", position=1, body="# Ticket 0042\n")

        text = build_instructions(AgentKind.IMPLEMENTATION, ticket)

        assert text.count(NOT_SPECIFIED) == 3

    def test_non_runnable_kind_raises(self, qa_ticket: Ticket) -> None:
        with pytest.raises(ValueError):
            build_instructions(AgentKind.STANDUP, qa_ticket)


@pytest.mark.unit
class TestBuildJobSpec:
    """Tests for build_job_spec."""

    def test_implementation_branches(self, qa_ticket: Ticket) -> None:
        spec = build_job_spec(AgentKind.IMPLEMENTATION, qa_ticket, default_branch="main")

        assert spec.source_ref == "main"
        assert spec.target_branch == "ticket/0099-implementation"
        assert spec.agent_kind == "implementation-agent"
        assert spec.ticket_id == "0099"

    def test_qa_defaults_to_implementation_branch(self, qa_ticket: Ticket) -> None:
        spec = build_job_spec(AgentKind.QA, qa_ticket, default_branch="trunk")

        assert spec.source_ref == "ticket/0099-implementation"
        assert spec.target_branch == "trunk"

    def test_qa_uses_branch_from_body(self, qa_ticket: Ticket) -> None:
        qa_ticket.body += "\n- **Branch**: `feature/board-view`\n"

        spec = build_job_spec(AgentKind.QA, qa_ticket)

        assert spec.source_ref == "feature/board-view"

    def test_qa_on_default_branch_when_merged(self, qa_ticket: Ticket) -> None:
        qa_ticket.body += "\n- **Branch**: `feature/x`\nMerged to main for QA access.\n"

        spec = build_job_spec(AgentKind.QA, qa_ticket, default_branch="main")

        assert spec.source_ref == "main"
