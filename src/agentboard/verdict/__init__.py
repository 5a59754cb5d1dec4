"""Verdict Parser - structured pass/fail outcomes from completion reports."""

from agentboard.verdict.models import UNKNOWN_VERDICT, Verdict, VerdictOutcome
from agentboard.verdict.parser import VERDICT_PATTERN, format_verdict_line, parse_verdict

__all__ = [
    "UNKNOWN_VERDICT",
    "VERDICT_PATTERN",
    "Verdict",
    "VerdictOutcome",
    "format_verdict_line",
    "parse_verdict",
]
