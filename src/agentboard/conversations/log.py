"""Append-only conversation log."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agentboard.conversations.models import Message


class ConversationLog:
    """Append-only list of messages for one agent kind.

    Appending a message whose ID is already present is a no-op.
    """

    def __init__(self, agent_kind: str) -> None:
        self.agent_kind = agent_kind
        self._messages: list[Message] = []
        self._ids: set[str] = set()
        self._lock = threading.Lock()

    def append(self, message: Message) -> bool:
        """Append a message.

        Returns:
            True if appended, False if a message with the same ID exists.
        """
        with self._lock:
            if message.id in self._ids:
                return False
            self._ids.add(message.id)
            self._messages.append(message)
            return True

    @property
    def messages(self) -> list[Message]:
        """Messages in append order."""
        with self._lock:
            return list(self._messages)

    def for_run(self, run_id: str) -> list[Message]:
        """Messages produced by one run, in append order."""
        return [m for m in self.messages if m.run_id == run_id]

    def __len__(self) -> int:
        return len(self._messages)
