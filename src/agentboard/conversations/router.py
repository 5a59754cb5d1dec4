"""ConversationRouter - delivers run events to the right conversation log."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from agentboard.conversations.log import ConversationLog
from agentboard.conversations.models import Message, MessageLabel
from agentboard.logging import get_logger
from agentboard.triggers.models import AgentKind

if TYPE_CHECKING:
    from agentboard.conversations.events import EventManager
    from agentboard.diagnostics import Diagnostics
    from agentboard.orchestrator.models import StageEvent

logger = get_logger("conversations")


class RunBindingError(Exception):
    """A run is already bound to a different conversation."""


class ConversationRouter:
    """Routes stage events to the conversation log of the run's agent kind.

    A run's agent kind is bound once, when the run is created, and held until
    the run is released. The conversation the user currently looks at plays
    no part in routing. Events for unbound runs are never appended to a log;
    they are kept in diagnostics as orphaned completions.
    """

    def __init__(
        self,
        event_manager: EventManager | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        self._event_manager = event_manager
        self._diagnostics = diagnostics
        self._logs = {kind: ConversationLog(kind.value) for kind in AgentKind}
        self._bindings: dict[str, AgentKind] = {}
        self._lock = threading.Lock()

    def bind(self, run_id: str, agent_kind: AgentKind | str) -> None:
        """Bind a run to a conversation for the run's whole lifetime.

        Raises:
            RunBindingError: If the run is already bound to another kind.
        """
        kind = AgentKind(agent_kind)
        with self._lock:
            current = self._bindings.get(run_id)
            if current is not None and current is not kind:
                raise RunBindingError(f"Run {run_id} is already bound to {current.value}")
            self._bindings[run_id] = kind

    def binding(self, run_id: str) -> AgentKind | None:
        """The agent kind a run is bound to, if any."""
        with self._lock:
            return self._bindings.get(run_id)

    def release(self, run_id: str) -> None:
        """Forget a run's binding once its terminal event was delivered."""
        with self._lock:
            self._bindings.pop(run_id, None)

    def log(self, agent_kind: AgentKind | str) -> ConversationLog:
        """The conversation log of one agent kind."""
        return self._logs[AgentKind(agent_kind)]

    def append_user_message(
        self, agent_kind: AgentKind | str, content: str, message_id: str
    ) -> Message | None:
        """Append the user's trigger message.

        Returns:
            The appended message, or None if a message with this ID exists.
        """
        kind = AgentKind(agent_kind)
        message = Message(
            id=message_id, agent_kind=kind.value, label=MessageLabel.USER, content=content
        )
        return self._append(kind, message)

    def append_system_message(
        self, agent_kind: AgentKind | str, content: str, message_id: str
    ) -> Message | None:
        """Append a message from the system (not tied to a run)."""
        kind = AgentKind(agent_kind)
        message = Message(
            id=message_id, agent_kind=kind.value, label=MessageLabel.SYSTEM, content=content
        )
        return self._append(kind, message)

    def route(
        self,
        run_id: str,
        event: StageEvent,
        agent_kind: AgentKind | str | None = None,
    ) -> Message | None:
        """Append a run's stage event to the log of the run's bound agent kind.

        Args:
            run_id: Run that produced the event.
            event: The stage event. Terminal events carry the full report.
            agent_kind: Kind the caller believes the run has. Only used to
                detect disagreement with the binding.

        Returns:
            The appended message, or None if the event was orphaned or was
            already delivered.
        """
        bound = self.binding(run_id)
        if bound is None or (agent_kind is not None and AgentKind(agent_kind) is not bound):
            self._orphan(run_id, event, bound, agent_kind)
            return None

        message = Message(
            id=f"{run_id}-{event.sequence}",
            agent_kind=bound.value,
            label=event.label,
            content=event.message,
            run_id=run_id,
            created_at=event.created_at,
            metadata={"stage": event.stage.value, "terminal": event.terminal, **event.payload},
        )
        return self._append(bound, message)

    def _append(self, kind: AgentKind, message: Message) -> Message | None:
        if not self._logs[kind].append(message):
            logger.debug("Message %s already in %s conversation", message.id, kind.value)
            return None
        if self._event_manager is not None:
            self._event_manager.emit_message(message.to_dict())
        return message

    def _orphan(
        self,
        run_id: str,
        event: StageEvent,
        bound: AgentKind | None,
        agent_kind: AgentKind | str | None,
    ) -> None:
        metadata = {
            "stage": event.stage.value,
            "sequence": event.sequence,
            "terminal": event.terminal,
            "bound_agent_kind": bound.value if bound else None,
            "claimed_agent_kind": str(agent_kind) if agent_kind is not None else None,
            **event.payload,
        }
        if self._diagnostics is not None:
            self._diagnostics.record_orphan(run_id, event.message, metadata)
        else:
            logger.warning("Orphaned event for run %s: %s", run_id, metadata)
