"""Instruction payloads for implementation and QA jobs."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from agentboard.runtime.models import JobSpec
from agentboard.triggers.models import AgentKind
from agentboard.verdict import VerdictOutcome, format_verdict_line

if TYPE_CHECKING:
    from agentboard.board.models import Ticket

NOT_SPECIFIED = "(not specified)"

_BRANCH_PATTERN = re.compile(r"-?\s*\*\*Branch\*\*:\s*`?([^`\n]+)`?", re.IGNORECASE)
_MERGED_FOR_QA_PATTERN = re.compile(r"merged to\s*`?main`?\s*for\s*QA\s*access", re.IGNORECASE)


def ticket_section(body: str, heading: str) -> str:
    """Text of a ``## <heading>`` section, up to the next ``##`` heading."""
    pattern = re.compile(
        rf"^##\s*{re.escape(heading)}[^\n]*\n(.*?)(?=^##|\Z)",
        re.IGNORECASE | re.MULTILINE | re.DOTALL,
    )
    match = pattern.search(body)
    return match.group(1).strip() if match else ""


def implementation_branch(ticket_id: str) -> str:
    """Branch an implementation job pushes to."""
    return f"ticket/{ticket_id}-implementation"


def _ticket_summary(ticket: Ticket) -> list[str]:
    return [
        "## Goal",
        ticket_section(ticket.body, "Goal") or NOT_SPECIFIED,
        "",
        "## Human-verifiable deliverable",
        ticket_section(ticket.body, "Human-verifiable deliverable") or NOT_SPECIFIED,
        "",
        "## Acceptance criteria",
        ticket_section(ticket.body, "Acceptance criteria") or NOT_SPECIFIED,
    ]


def build_instructions(agent_kind: AgentKind, ticket: Ticket) -> str:
    """Build the instruction text for a job working on a ticket.

    Args:
        agent_kind: Implementation or QA.
        ticket: Target ticket.

    Returns:
        Instruction text. QA instructions require the literal verdict line.

    Raises:
        ValueError: If agent_kind does not run jobs.
    """
    title = f" - {ticket.title}" if ticket.title else ""
    if agent_kind is AgentKind.IMPLEMENTATION:
        lines = [
            "Implement this ticket.",
            "",
            f"**Ticket**: {ticket.id}{title}",
            f"**Branch**: {implementation_branch(ticket.id)}",
            "",
            *_ticket_summary(ticket),
            "",
            "When you are done, end your reply with a completion summary of what changed.",
        ]
    elif agent_kind is AgentKind.QA:
        pass_line = format_verdict_line(VerdictOutcome.PASS, ticket.id)
        fail_line = format_verdict_line(VerdictOutcome.FAIL, ticket.id)
        lines = [
            "QA this ticket implementation. Review the code and verify every acceptance criterion.",
            "",
            f"**Ticket**: {ticket.id}{title}",
            "",
            *_ticket_summary(ticket),
            "",
            "## Verdict",
            "End your report with exactly one of these lines:",
            "",
            pass_line,
            fail_line,
        ]
    else:
        raise ValueError(f"Agent kind {agent_kind} does not launch jobs")
    return "\n".join(lines)


def build_job_spec(agent_kind: AgentKind, ticket: Ticket, default_branch: str = "main") -> JobSpec:
    """Build the full job spec for a ticket.

    Implementation jobs start from the default branch and push to the ticket
    branch. QA jobs verify the ticket branch named in the body (or the
    implementation branch), or the default branch if the work was merged
    there for QA.
    """
    instructions = build_instructions(agent_kind, ticket)
    if agent_kind is AgentKind.IMPLEMENTATION:
        return JobSpec(
            agent_kind=agent_kind.value,
            ticket_id=ticket.id,
            instructions=instructions,
            source_ref=default_branch,
            target_branch=implementation_branch(ticket.id),
        )

    match = _BRANCH_PATTERN.search(ticket.body)
    branch = match.group(1).strip() if match else implementation_branch(ticket.id)
    if _MERGED_FOR_QA_PATTERN.search(ticket.body):
        branch = default_branch
    return JobSpec(
        agent_kind=agent_kind.value,
        ticket_id=ticket.id,
        instructions=instructions,
        source_ref=branch,
        target_branch=default_branch,
    )
