"""Ticket metadata header (frontmatter) handling.

A ticket body may start with a block of ``key: value`` lines delimited by
``---``. The board keeps its column, position and move time in that block.
Other keys are preserved as-is.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - used at runtime

HEADER_DELIMITER = "---"

KANBAN_COLUMN_KEY = "kanbanColumnId"
KANBAN_POSITION_KEY = "kanbanPosition"
KANBAN_MOVED_AT_KEY = "kanbanMovedAt"


def parse_header(body: str) -> tuple[dict[str, str] | None, str]:
    """Split a body into its header fields and the remaining text.

    Args:
        body: Full ticket body.

    Returns:
        (fields, rest). fields is None when the body has no complete header.
    """
    if not body.startswith(HEADER_DELIMITER):
        return None, body
    after_open = body[len(HEADER_DELIMITER) :]
    close_idx = after_open.find("\n" + HEADER_DELIMITER)
    if close_idx == -1:
        return None, body

    fields: dict[str, str] = {}
    for line in after_open[:close_idx].strip().split("\n"):
        key, sep, value = line.partition(":")
        if sep and key.strip():
            fields[key.strip()] = value.strip()
    rest = after_open[close_idx + len(HEADER_DELIMITER) + 1 :].lstrip()
    return fields, rest


def render_header(fields: dict[str, str], rest: str) -> str:
    """Serialize header fields back in front of the body text."""
    lines = "\n".join(f"{key}: {value}" for key, value in fields.items())
    return f"{HEADER_DELIMITER}\n{lines}\n{HEADER_DELIMITER}\n\n{rest}"


def rewrite_kanban_header(body: str, column_id: str, position: int, moved_at: datetime) -> str:
    """Merge the board's placement into an existing header.

    Bodies without a header are returned unchanged.
    """
    fields, rest = parse_header(body)
    if fields is None:
        return body
    fields[KANBAN_COLUMN_KEY] = column_id
    fields[KANBAN_POSITION_KEY] = str(position)
    fields[KANBAN_MOVED_AT_KEY] = moved_at.isoformat()
    return render_header(fields, rest)
