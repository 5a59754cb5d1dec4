"""Data models for verdicts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class VerdictOutcome(StrEnum):
    """Outcome extracted from a completion report."""

    PASS = "pass"
    FAIL = "fail"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Verdict:
    """A parsed verdict.

    Attributes:
        outcome: pass, fail or unknown.
        ticket_id: Ticket named on the verdict line (None when unknown).
        line: The verdict line as it appeared in the report.
    """

    outcome: VerdictOutcome
    ticket_id: str | None = None
    line: str | None = None

    @property
    def is_known(self) -> bool:
        return self.outcome is not VerdictOutcome.UNKNOWN

    def applies_to(self, ticket_id: str | None) -> bool:
        """Whether this is a pass/fail verdict for the given ticket."""
        return self.is_known and ticket_id is not None and self.ticket_id == ticket_id


UNKNOWN_VERDICT = Verdict(outcome=VerdictOutcome.UNKNOWN)
