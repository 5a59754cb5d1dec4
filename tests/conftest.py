"""Shared pytest fixtures and configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentboard.diagnostics import Diagnostics
from agentboard.runtime import JobHandle, JobSpec, JobStatus, JobUpdate
from agentboard.state_store import StateStore


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


class ScriptedRunner:
    """JobRunner that returns scripted poll results.

    Each poll pops the next item; the last item repeats. Exceptions in the
    script are raised instead of returned.
    """

    def __init__(
        self,
        updates: list[JobUpdate | Exception] | None = None,
        launch_error: Exception | None = None,
    ) -> None:
        self.updates = list(updates or [JobUpdate(status=JobStatus.RUNNING)])
        self.launch_error = launch_error
        self.launched: list[JobSpec] = []
        self.polls = 0

    async def launch(self, spec: JobSpec) -> JobHandle:
        self.launched.append(spec)
        if self.launch_error is not None:
            raise self.launch_error
        return JobHandle(job_id=f"job-{len(self.launched)}")

    async def poll(self, handle: JobHandle) -> JobUpdate:
        self.polls += 1
        item = self.updates.pop(0) if len(self.updates) > 1 else self.updates[0]
        if isinstance(item, Exception):
            raise item
        return item


def finished(report: str) -> JobUpdate:
    """A finished JobUpdate carrying a report."""
    return JobUpdate(status=JobStatus.FINISHED, final_text=report, raw_status="FINISHED")


def running(text: str | None = None) -> JobUpdate:
    """A running JobUpdate."""
    return JobUpdate(status=JobStatus.RUNNING, partial_text=text, raw_status="RUNNING")


def ticket_body(ticket_id: str = "0099", column_id: str = "col-qa") -> str:
    """A ticket body with a metadata header and the usual sections."""
    return (
        "---\n"
        f"kanbanColumnId: {column_id}\n"
        "kanbanPosition: 1\n"
        "kanbanMovedAt: 2026-01-01T00:00:00+00:00\n"
        "---\n\n"
        f"# Ticket {ticket_id}\n\n"
        "## Goal\n\nShow the board.\n\n"
        "## Human-verifiable deliverable\n\nA board is visible.\n\n"
        "## Acceptance criteria\n\n- [ ] Columns render\n"
    )


@pytest.fixture
def make_runner() -> type[ScriptedRunner]:
    """Factory for scripted job runners."""
    return ScriptedRunner


@pytest.fixture
def updates():
    """Helpers to build JobUpdates: updates.finished(text), updates.running(text)."""

    class _Updates:
        finished = staticmethod(finished)
        running = staticmethod(running)

    return _Updates


@pytest.fixture
def make_body():
    """Factory for ticket bodies."""
    return ticket_body


@pytest.fixture
def diagnostics() -> Diagnostics:
    """A fresh diagnostics sink."""
    return Diagnostics()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """A temporary database file path."""
    return str(tmp_path / "agentboard.db")


@pytest.fixture
def store(db_path: str):
    """A StateStore on a temporary SQLite file."""
    s = StateStore(db_path)
    yield s
    s.close()
