"""Data models for conversation logs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class MessageLabel(StrEnum):
    """Label attached to every conversation message."""

    USER = "user"
    STAGE = "stage"
    PROGRESS = "progress"
    COMPLETION_REPORT = "completion_report"
    ERROR = "error"
    SYSTEM = "system"


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Message:
    """One entry in a conversation log.

    Attributes:
        id: Unique message ID within the log.
        agent_kind: Conversation the message belongs to.
        label: What kind of message this is.
        content: Full message text (never truncated).
        run_id: Run that produced the message, if any.
        created_at: When the message was appended.
        metadata: Extra data (stage, verdict, diagnostics...).
    """

    id: str
    agent_kind: str
    label: MessageLabel
    content: str
    run_id: str | None = None
    created_at: datetime = field(default_factory=_now)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.label in (MessageLabel.COMPLETION_REPORT, MessageLabel.ERROR)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "id": self.id,
            "agent_kind": self.agent_kind,
            "label": self.label.value,
            "content": self.content,
            "run_id": self.run_id,
            "created_at": self.created_at.isoformat(),
            "metadata": self.metadata,
        }
