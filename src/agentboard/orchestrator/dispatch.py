"""Dispatcher - the single authoritative dispatch path for triggers."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from agentboard.logging import get_logger
from agentboard.orchestrator.exceptions import DispatchError
from agentboard.orchestrator.models import DispatchResult

if TYPE_CHECKING:
    from agentboard.conversations.router import ConversationRouter
    from agentboard.orchestrator.models import AgentRun
    from agentboard.orchestrator.orchestrator import RunOrchestrator
    from agentboard.triggers.deduplicator import TriggerDeduplicator
    from agentboard.triggers.models import TriggerEvent

logger = get_logger("orchestrator")


class Dispatcher:
    """Turns one accepted trigger into one user message and at most one run.

    This is the only place that appends trigger messages and starts runs, so
    no two call sites can each assume the other did not.
    """

    def __init__(
        self,
        deduplicator: TriggerDeduplicator,
        router: ConversationRouter,
        orchestrator: RunOrchestrator,
    ) -> None:
        self.deduplicator = deduplicator
        self.router = router
        self.orchestrator = orchestrator
        self._tasks: dict[str, asyncio.Task[AgentRun]] = {}

    @property
    def active_run_ids(self) -> list[str]:
        """IDs of runs whose task has not finished."""
        return [run_id for run_id, task in self._tasks.items() if not task.done()]

    async def dispatch(self, trigger: TriggerEvent) -> DispatchResult:
        """Dispatch a trigger.

        Args:
            trigger: Trigger with the event ID assigned at the user action.

        Returns:
            DispatchResult. Rejected duplicates have no side effects.
        """
        decision = self.deduplicator.accept(trigger)
        if not decision.accepted:
            return DispatchResult(
                accepted=False, event_id=trigger.event_id, reason=decision.reason
            )

        message = self.router.append_user_message(
            trigger.agent_kind, trigger.content, message_id=trigger.event_id
        )
        if not trigger.agent_kind.is_runnable:
            return DispatchResult(
                accepted=True,
                event_id=trigger.event_id,
                message_id=message.id if message else None,
            )

        run = self.orchestrator.create_run(trigger)
        task = asyncio.create_task(self.orchestrator.execute(run), name=f"agent-run-{run.run_id}")
        self._tasks[run.run_id] = task
        task.add_done_callback(lambda done: self._on_done(run, done))
        logger.info("Dispatched %s as run %s", trigger.event_id, run.run_id)
        return DispatchResult(
            accepted=True,
            event_id=trigger.event_id,
            message_id=message.id if message else None,
            run_id=run.run_id,
        )

    def _on_done(self, run: AgentRun, task: asyncio.Task[AgentRun]) -> None:
        self._tasks.pop(run.run_id, None)
        if task.cancelled() and not run.is_terminal:
            # Cancelled before execute() got to run
            self.orchestrator.abandon(run)

    async def join(self, run_id: str) -> AgentRun:
        """Wait for a run to finish and return it.

        Raises:
            DispatchError: If no such run is in flight.
        """
        task = self._tasks.get(run_id)
        if task is None:
            raise DispatchError(f"Run {run_id} is not in flight")
        return await task

    def cancel(self, run_id: str) -> bool:
        """Stop waiting for a run. Its job keeps running on the runtime.

        Returns:
            True if a cancellation was requested.
        """
        task = self._tasks.get(run_id)
        if task is None or task.done():
            return False
        logger.info("Cancelling run %s", run_id)
        return task.cancel()

    async def shutdown(self) -> None:
        """Cancel every in-flight run and wait for them to end."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
