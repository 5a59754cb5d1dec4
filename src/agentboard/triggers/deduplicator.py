"""TriggerDeduplicator - one accepted trigger per physical user action."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import TYPE_CHECKING

from agentboard.logging import get_logger
from agentboard.triggers.models import TriggerDecision, TriggerEvent
from agentboard.triggers.parsing import trigger_signature

if TYPE_CHECKING:
    from collections.abc import Callable

    from agentboard.diagnostics import Diagnostics

logger = get_logger("triggers")


class TriggerDeduplicator:
    """Rejects repeated deliveries of the same trigger.

    A trigger is a duplicate if its event ID was already accepted, or if an
    equivalent trigger was accepted within the rolling window: for
    implementation and QA agents one that targets the same ticket, otherwise
    one with the same normalized content. Nothing is kept longer than the window.
    """

    def __init__(
        self,
        window_seconds: float = 5.0,
        diagnostics: Diagnostics | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the deduplicator.

        Args:
            window_seconds: Rolling window in seconds.
            diagnostics: Optional sink recording the last accepted trigger.
            clock: Monotonic time source.
        """
        self.window_seconds = window_seconds
        self._diagnostics = diagnostics
        self._clock = clock
        self._lock = threading.Lock()
        self._event_ids: OrderedDict[str, float] = OrderedDict()
        self._signatures: dict[tuple[str, str], float] = {}
        self._last_accepted: TriggerEvent | None = None

    @property
    def last_accepted(self) -> TriggerEvent | None:
        """The most recently accepted trigger."""
        return self._last_accepted

    def accept(self, trigger: TriggerEvent) -> TriggerDecision:
        """Decide whether a trigger may be dispatched.

        Args:
            trigger: The incoming trigger.

        Returns:
            TriggerDecision; accepted is True at most once per event ID within the window.
        """
        with self._lock:
            now = self._clock()
            self._prune(now)

            if trigger.event_id in self._event_ids:
                return self._reject(trigger, "duplicate delivery of event")
            signature = trigger_signature(trigger)
            if signature in self._signatures:
                return self._reject(trigger, "identical trigger already accepted")

            self._event_ids[trigger.event_id] = now
            self._signatures[signature] = now
            self._last_accepted = trigger

        if self._diagnostics is not None:
            self._diagnostics.record_trigger(
                event_id=trigger.event_id,
                agent_kind=trigger.agent_kind.value,
                content=trigger.content,
                timestamp=trigger.created_at,
            )
        return TriggerDecision(accepted=True, event_id=trigger.event_id)

    def _reject(self, trigger: TriggerEvent, reason: str) -> TriggerDecision:
        logger.info(
            "Rejected trigger %s for %s: %s", trigger.event_id, trigger.agent_kind, reason
        )
        return TriggerDecision(accepted=False, event_id=trigger.event_id, reason=reason)

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._event_ids:
            event_id, seen_at = next(iter(self._event_ids.items()))
            if seen_at > cutoff:
                break
            del self._event_ids[event_id]
        for signature in [s for s, seen_at in self._signatures.items() if seen_at <= cutoff]:
            del self._signatures[signature]
