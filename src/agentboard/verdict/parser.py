"""Verdict parser.

Grammar: a line that is exactly ``RESULT: PASS — <ticket-id>`` or
``RESULT: FAIL — <ticket-id>``, optionally prefixed with ``QA `` and wrapped
in markdown emphasis, quote or heading marks. The tokens are case-sensitive,
single spaces separate them and the separator must be an em-dash. A verdict
mentioned inside a sentence is not a verdict line. The first matching line
wins; anything else yields an unknown verdict.
"""

from __future__ import annotations

import re

from agentboard.verdict.models import UNKNOWN_VERDICT, Verdict, VerdictOutcome

VERDICT_PATTERN = re.compile(
    r"^[\s*_>#]*(?:QA )?RESULT: (PASS|FAIL) — ([A-Za-z0-9][A-Za-z0-9-]*)[*_]*\.?[*_]*\s*$"
)


def parse_verdict(report_text: str | None) -> Verdict:
    """Extract the verdict from a completion report.

    Args:
        report_text: Full completion report. None or empty is allowed.

    Returns:
        The first verdict found, or an unknown verdict. Never raises.
    """
    if not report_text:
        return UNKNOWN_VERDICT
    for line in report_text.splitlines():
        match = VERDICT_PATTERN.match(line)
        if match:
            return Verdict(
                outcome=VerdictOutcome(match.group(1).lower()),
                ticket_id=match.group(2),
                line=line.strip(),
            )
    return UNKNOWN_VERDICT


def format_verdict_line(outcome: VerdictOutcome, ticket_id: str) -> str:
    """Render the verdict line an agent is asked to end its report with."""
    if outcome is VerdictOutcome.UNKNOWN:
        raise ValueError("Only pass or fail verdicts can be rendered")
    return f"RESULT: {outcome.value.upper()} — {ticket_id}"
