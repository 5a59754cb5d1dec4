"""The poll loop shared by every run."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from agentboard.logging import get_logger
from agentboard.orchestrator.exceptions import RunTimeoutError
from agentboard.runtime.exceptions import PollError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from agentboard.orchestrator.models import PollPolicy
    from agentboard.runtime import JobHandle, JobRunner, JobUpdate

logger = get_logger("orchestrator")


async def poll_until_terminal(
    runner: JobRunner,
    handle: JobHandle,
    policy: PollPolicy,
    on_update: Callable[[JobUpdate], None],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> JobUpdate:
    """Poll a job until it reaches a terminal status.

    Args:
        runner: Job runner to poll.
        handle: Job to poll.
        policy: Interval, wall-clock budget and retry limit.
        on_update: Called with every non-terminal update.
        sleep: Awaitable sleep, replaced in tests.
        clock: Monotonic clock, replaced in tests.

    Returns:
        The terminal JobUpdate.

    Raises:
        RunTimeoutError: If the budget runs out. No further polls are issued.
        PollError: If more than max_retries consecutive polls fail.
    """
    deadline = clock() + policy.timeout
    failures = 0

    while True:
        remaining = deadline - clock()
        if remaining <= 0:
            raise RunTimeoutError(_timeout_message(policy))

        try:
            update = await asyncio.wait_for(runner.poll(handle), timeout=remaining)
        except TimeoutError as e:
            raise RunTimeoutError(_timeout_message(policy)) from e
        except PollError as e:
            failures += 1
            if failures > policy.max_retries:
                raise PollError(
                    f"Lost contact with the agent runtime after {failures} attempts: {e}"
                ) from e
            logger.warning(
                "Poll of job %s failed (attempt %d/%d): %s",
                handle.job_id,
                failures,
                policy.max_retries + 1,
                e,
            )
        else:
            failures = 0
            if update.is_terminal:
                return update
            on_update(update)

        remaining = deadline - clock()
        if remaining <= 0:
            raise RunTimeoutError(_timeout_message(policy))
        await sleep(min(policy.interval, remaining))


def _timeout_message(policy: PollPolicy) -> str:
    return (
        f"Timed out after {policy.timeout:g}s waiting for the agent to finish. "
        "The agent may still be running on the runtime."
    )
