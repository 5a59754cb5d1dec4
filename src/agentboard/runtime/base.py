"""JobRunner protocol - the boundary to the external agent runtime."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from agentboard.runtime.models import JobHandle, JobSpec, JobUpdate


class JobRunner(Protocol):
    """Launches and polls external jobs.

    Knows nothing about tickets, columns or verdicts.
    """

    async def launch(self, spec: JobSpec) -> JobHandle:
        """Launch a job.

        Raises:
            LaunchError: If the runtime rejects the job.
        """
        ...

    async def poll(self, handle: JobHandle) -> JobUpdate:
        """Poll a job once.

        Raises:
            PollError: On a transient transport failure.
        """
        ...
