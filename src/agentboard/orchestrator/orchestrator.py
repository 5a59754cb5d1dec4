"""RunOrchestrator - drives one AgentRun from trigger to terminal event."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from agentboard.board.exceptions import StoreError, StoreWriteError, TicketNotFoundError
from agentboard.board.models import Column
from agentboard.board.rules import post_run_move, pre_run_move
from agentboard.conversations.models import MessageLabel
from agentboard.logging import get_logger, run_logger
from agentboard.orchestrator.exceptions import (
    PreconditionError,
    RunTimeoutError,
    ValidationError,
    VerdictMissingError,
)
from agentboard.orchestrator.models import AgentRun, PollPolicy, RunOutcome, RunStage, StageEvent
from agentboard.orchestrator.poller import poll_until_terminal
from agentboard.runtime.exceptions import LaunchError, PollError
from agentboard.runtime.models import JobStatus
from agentboard.runtime.prompts import build_job_spec
from agentboard.triggers.models import AgentKind
from agentboard.triggers.parsing import extract_ticket_id, usage_hint
from agentboard.verdict import parse_verdict

if TYPE_CHECKING:
    from agentboard.board.models import MoveResult, Ticket
    from agentboard.board.rules import PlannedMove
    from agentboard.board.state_machine import ColumnStateMachine
    from agentboard.board.store import TicketStore
    from agentboard.conversations.events import EventManager
    from agentboard.conversations.router import ConversationRouter
    from agentboard.runtime import JobRunner, JobUpdate
    from agentboard.triggers.models import TriggerEvent

logger = get_logger("orchestrator")

# Failures that are part of normal operation; anything else is logged with a traceback
EXPECTED_FAILURES = (
    ValidationError,
    LaunchError,
    PollError,
    RunTimeoutError,
    StoreError,
)

NO_REPORT = "The agent finished without a completion report."


class RunOrchestrator:
    """Drives runs through their stages.

    Preparing -> FetchingTicket -> ResolvingTarget -> Launching -> Polling ->
    Completed | Failed. Every stage transition is routed to the run's
    conversation as an ordered stage event; every run ends with exactly one
    terminal event. Ticket moves go through the column state machine only.
    """

    def __init__(
        self,
        state_machine: ColumnStateMachine,
        store: TicketStore,
        runner: JobRunner,
        router: ConversationRouter,
        policy: PollPolicy | None = None,
        default_branch: str = "main",
        event_manager: EventManager | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            state_machine: The single entry point for column moves.
            store: Ticket store, read when fetching the ticket.
            runner: Job runner for the external agent runtime.
            router: Conversation router that receives stage events.
            policy: Poll cadence and limits.
            default_branch: Branch implementation jobs start from.
            event_manager: Optional sink for run lifecycle events.
        """
        self.state_machine = state_machine
        self.store = store
        self.runner = runner
        self.router = router
        self.policy = policy or PollPolicy()
        self.default_branch = default_branch
        self.event_manager = event_manager
        self._runs: dict[str, AgentRun] = {}

    @property
    def active_runs(self) -> list[AgentRun]:
        """Runs currently in flight."""
        return list(self._runs.values())

    def get_run(self, run_id: str) -> AgentRun | None:
        """An in-flight run by ID."""
        return self._runs.get(run_id)

    def create_run(self, trigger: TriggerEvent) -> AgentRun:
        """Create a run for an accepted trigger and bind its conversation."""
        run = AgentRun.from_trigger(trigger)
        self._register(run)
        return run

    def _register(self, run: AgentRun) -> None:
        self.router.bind(run.run_id, run.agent_kind)
        if run.run_id not in self._runs:
            self._runs[run.run_id] = run
            logger.info("Run %s created for %s", run.run_id, run.agent_kind.value)
            if self.event_manager is not None:
                self.event_manager.emit_run_started(
                    run.run_id, run.agent_kind.value, run.trigger_event_id
                )

    async def execute(self, run: AgentRun) -> AgentRun:
        """Execute a run to its terminal stage.

        Never raises for run failures; they end the run in the failed stage.
        Cancellation ends the run as cancelled and is then re-raised.

        Returns:
            The finished run.
        """
        self._register(run)
        log = run_logger("orchestrator", run.run_id, run.agent_kind.value)
        try:
            await self._execute_stages(run)
        except asyncio.CancelledError:
            log.info("Cancelled")
            self._fail(
                run,
                RunOutcome.CANCELLED,
                "Run cancelled. The agent may still be running on the runtime.",
            )
            raise
        except EXPECTED_FAILURES as e:
            log.warning("Failed in %s: %s", run.stage.value, e)
            self._fail(run, RunOutcome.ERROR, str(e))
        except Exception as e:
            log.exception("Failed unexpectedly in %s", run.stage.value)
            self._fail(run, RunOutcome.ERROR, f"Unexpected error: {e}")
        finally:
            self._finish(run)
        return run

    def abandon(self, run: AgentRun) -> None:
        """End a run that was cancelled before it started executing."""
        self._fail(run, RunOutcome.CANCELLED, "Run cancelled before it started.")
        self._finish(run)

    async def _execute_stages(self, run: AgentRun) -> None:
        self._emit(run, RunStage.PREPARING, f"{run.agent_kind.display_name} run started.")
        ticket_id = extract_ticket_id(run.agent_kind, run.content)
        if ticket_id is None:
            raise ValidationError(
                f"Could not tell which ticket to work on. {usage_hint(run.agent_kind)}"
            )
        run.ticket_id = ticket_id

        self._emit(run, RunStage.FETCHING_TICKET, f"Fetching ticket {ticket_id}.")
        try:
            ticket = await asyncio.to_thread(self.store.get_ticket, ticket_id)
        except TicketNotFoundError as e:
            raise ValidationError(f"Ticket {ticket_id} not found.") from e

        self._emit(run, RunStage.RESOLVING_TARGET, f"Resolving target for ticket {ticket_id}.")
        column = await self._pre_run_move(run, ticket)

        spec = build_job_spec(run.agent_kind, ticket, self.default_branch)
        self._emit(run, RunStage.LAUNCHING, f"Launching agent for ticket {ticket_id}.")
        handle = await self.runner.launch(spec)
        run.job_id = handle.job_id

        self._emit(
            run,
            RunStage.POLLING,
            f"Agent launched (job {handle.job_id}). Waiting for it to finish.",
            payload={"job_id": handle.job_id},
        )
        update = await poll_until_terminal(
            self.runner,
            handle,
            self.policy,
            on_update=lambda u: self._on_progress(run, u),
        )

        if update.status is JobStatus.FINISHED:
            await self._complete(run, update, column)
        else:
            outcome = (
                RunOutcome.CANCELLED if update.status is JobStatus.CANCELLED else RunOutcome.ERROR
            )
            self._fail(
                run,
                outcome,
                update.final_text or f"Agent ended with status {update.status.value}.",
                payload={"job_status": update.raw_status or update.status.value},
            )

    async def _pre_run_move(self, run: AgentRun, ticket: Ticket) -> str | None:
        """Apply the pre-run move. Returns the column the ticket is now expected in."""
        planned = pre_run_move(run.agent_kind)
        if planned is None:
            return ticket.column_id

        result = await self._attempt(ticket.id, planned)
        if result.applied:
            self._note(
                run,
                f"Moved ticket {ticket.id} from {planned.from_column.title} "
                f"to {planned.to_column.title}.",
            )
            return planned.to_column.value
        if result.store_error:
            raise StoreWriteError(f"Could not move ticket {ticket.id}: {result.reason}")

        skipped = PreconditionError(result.reason or "ticket not in expected column")
        run.diagnostics.append(f"Pre-run move skipped: {skipped}")
        current = result.ticket.column_id if result.ticket else ticket.column_id
        self._note(run, f"Ticket {ticket.id} left in {_column_title(current)}.")
        return current

    async def _complete(self, run: AgentRun, update: JobUpdate, column: str | None) -> None:
        report = update.final_text or ""
        verdict = parse_verdict(report)
        run.report = report
        run.verdict = verdict
        payload: dict[str, Any] = {"verdict": verdict.outcome.value, **update.metadata}

        if verdict.applies_to(run.ticket_id):
            outcome = RunOutcome(verdict.outcome.value)
            planned = post_run_move(run.agent_kind, verdict.outcome)
            if planned is not None:
                await self._post_run_move(run, planned, column, payload)
        else:
            if verdict.is_known:
                missing = VerdictMissingError(
                    f"verdict missing: report names ticket {verdict.ticket_id}, "
                    f"not {run.ticket_id}"
                )
            else:
                missing = VerdictMissingError("verdict missing")
            run.diagnostics.append(str(missing))
            outcome = RunOutcome.UNKNOWN if run.agent_kind is AgentKind.QA else RunOutcome.PASS

        run.outcome = outcome
        run.advance(RunStage.COMPLETED)
        payload["outcome"] = outcome.value
        if run.diagnostics:
            payload["diagnostics"] = list(run.diagnostics)
        self._emit(
            run,
            RunStage.COMPLETED,
            report or NO_REPORT,
            label=MessageLabel.COMPLETION_REPORT,
            terminal=True,
            payload=payload,
        )
        run_logger("orchestrator", run.run_id, run.agent_kind.value).info(
            "Completed: %s", outcome.value
        )

    async def _post_run_move(
        self,
        run: AgentRun,
        planned: PlannedMove,
        column: str | None,
        payload: dict[str, Any],
    ) -> None:
        if column in {c.value for c in Column} and column != planned.from_column.value:
            planned = replace(planned, from_column=Column(column))

        result = await self._attempt(run.ticket_id or "", planned)
        if result.applied and result.ticket is not None:
            payload["moved_to"] = planned.to_column.value
            payload["position"] = result.ticket.position
            return
        if result.store_error:
            raise StoreWriteError(
                f"Could not move ticket {run.ticket_id} to {planned.to_column.title}: "
                f"{result.reason}"
            )
        run.diagnostics.append(f"Post-run move not applied: {result.reason}")

    async def _attempt(self, ticket_id: str, planned: PlannedMove) -> MoveResult:
        return await asyncio.to_thread(
            self.state_machine.attempt_move,
            ticket_id,
            planned.from_column,
            planned.to_column,
            planned.move_type,
        )

    def _on_progress(self, run: AgentRun, update: JobUpdate) -> None:
        text = update.partial_text or f"Status: {update.raw_status or update.status.value}"
        self._emit(
            run,
            RunStage.POLLING,
            text,
            label=MessageLabel.PROGRESS,
            payload={"job_status": update.raw_status or update.status.value},
        )

    def _note(self, run: AgentRun, message: str) -> None:
        self._emit(run, run.stage, message)

    def _emit(
        self,
        run: AgentRun,
        stage: RunStage,
        message: str,
        label: MessageLabel = MessageLabel.STAGE,
        terminal: bool = False,
        payload: dict[str, Any] | None = None,
    ) -> None:
        if not terminal and stage is not run.stage:
            run.advance(stage)
        event = StageEvent(
            run_id=run.run_id,
            sequence=run.next_sequence(),
            stage=stage,
            message=message,
            terminal=terminal,
            label=label,
            payload=payload or {},
        )
        self.router.route(run.run_id, event, run.agent_kind)

    def _fail(
        self,
        run: AgentRun,
        outcome: RunOutcome,
        message: str,
        payload: dict[str, Any] | None = None,
    ) -> None:
        if run.is_terminal:
            return
        run.outcome = outcome
        run.advance(RunStage.FAILED)
        if run.report:
            # The job finished; keep its report with the failure
            message = f"{message}\n\n{run.report}"
        data = {"outcome": outcome.value, **(payload or {})}
        if run.diagnostics:
            data["diagnostics"] = list(run.diagnostics)
        self._emit(
            run, RunStage.FAILED, message, label=MessageLabel.ERROR, terminal=True, payload=data
        )

    def _finish(self, run: AgentRun) -> None:
        self._runs.pop(run.run_id, None)
        self.router.release(run.run_id)
        if self.event_manager is not None:
            self.event_manager.emit_run_finished(
                run.run_id, run.agent_kind.value, run.outcome.value if run.outcome else None
            )


def _column_title(column_id: str | None) -> str:
    try:
        return Column(column_id).title
    except ValueError:
        return "no column"
