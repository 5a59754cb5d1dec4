"""Normalization of agent runtime payloads into JobUpdates."""

from __future__ import annotations

from typing import Any

from agentboard.runtime.models import JobStatus, JobUpdate

STATUS_MAP = {
    "CREATING": JobStatus.RUNNING,
    "PENDING": JobStatus.RUNNING,
    "RUNNING": JobStatus.RUNNING,
    "FINISHED": JobStatus.FINISHED,
    "FAILED": JobStatus.FAILED,
    "CANCELLED": JobStatus.CANCELLED,
    "ERROR": JobStatus.ERROR,
    "EXPIRED": JobStatus.ERROR,
}

REPORT_KEYS = ("completionReport", "report", "summary", "message")
PROGRESS_KEYS = ("progress", "statusMessage", "summary")

# Summaries the runtime reports when it has nothing to say
PLACEHOLDER_SUMMARIES = frozenset({"Completed.", "Done.", "Complete.", "Finished."})


def map_status(raw_status: str | None) -> JobStatus:
    """Map a runtime status string to a JobStatus. Unknown values mean running."""
    if not raw_status:
        return JobStatus.RUNNING
    return STATUS_MAP.get(raw_status.strip().upper(), JobStatus.RUNNING)


def is_placeholder(text: str | None) -> bool:
    """Whether a summary carries no information."""
    stripped = (text or "").strip()
    return not stripped or stripped in PLACEHOLDER_SUMMARIES


def _first_text(payload: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str) and not is_placeholder(value):
            return value
    return None


def normalize_status_payload(payload: dict[str, Any]) -> JobUpdate:
    """Convert a status payload into a JobUpdate.

    Args:
        payload: Decoded JSON body of a status response.

    Returns:
        JobUpdate. final_text is None for a finished job whose report is
        blank or a placeholder; the caller may look elsewhere for it.
    """
    raw_status = payload.get("status")
    raw_status = raw_status if isinstance(raw_status, str) else None
    status = map_status(raw_status)

    metadata: dict[str, Any] = {}
    target = payload.get("target")
    if isinstance(target, dict):
        pr_url = target.get("prUrl") or target.get("pr_url")
        if pr_url:
            metadata["pr_url"] = pr_url
        if target.get("branchName"):
            metadata["branch_name"] = target["branchName"]

    if status is JobStatus.RUNNING:
        return JobUpdate(
            status=status,
            partial_text=_first_text(payload, PROGRESS_KEYS),
            raw_status=raw_status,
            metadata=metadata,
        )

    final_text = _first_text(payload, REPORT_KEYS)
    if final_text is None and status is not JobStatus.FINISHED:
        final_text = f"Agent ended with status {raw_status or status.value}."
    return JobUpdate(status=status, final_text=final_text, raw_status=raw_status, metadata=metadata)


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(_content_text(part) for part in content)
    if isinstance(content, dict):
        for key in ("text", "content", "value"):
            if isinstance(content.get(key), str):
                return str(content[key])
    return ""


def last_assistant_message(conversation: dict[str, Any]) -> str | None:
    """Extract the last non-empty assistant message from a conversation payload."""
    messages = conversation.get("messages")
    if not isinstance(messages, list):
        nested = conversation.get("conversation")
        messages = nested.get("messages") if isinstance(nested, dict) else None
    if not isinstance(messages, list):
        return None

    for message in reversed(messages):
        if not isinstance(message, dict):
            continue
        if message.get("role") != "assistant" and message.get("type") != "assistant_message":
            continue
        text = _content_text(message.get("content") or message.get("text", "")).strip()
        if text:
            return text
    return None
