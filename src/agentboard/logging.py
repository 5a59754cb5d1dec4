"""Logging for agentboard.

Every component logs under the ``agentboard`` logger tree. setup_logging sends
that tree to a rotating file and optionally to stderr. Credentials are scrubbed
from each record before any handler writes it, and run loggers tag each line
with the run it belongs to.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

ROOT_LOGGER = "agentboard"
LOG_DIR_ENV = "AGENTBOARD_LOG_DIR"
LOG_LEVEL_ENV = "AGENTBOARD_LOG_LEVEL"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "agentboard.log"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Longest slice of a runtime response or report copied into one log line
LOG_PREVIEW_CHARS = 500

_SECRETS = (
    (re.compile(r"key_[A-Za-z0-9]{20,}"), "[API_KEY]"),
    (re.compile(r"\b(Basic|Bearer) [A-Za-z0-9+/=._-]+"), r"\1 [REDACTED]"),
    (re.compile(r"\b(api_?key|token)=[^&\s]+", re.IGNORECASE), r"\1=[REDACTED]"),
)


def sanitize_for_log(text: str) -> str:
    """Replace agent runtime keys and HTTP credentials with placeholders."""
    for pattern, replacement in _SECRETS:
        text = pattern.sub(replacement, text)
    return text


def truncate_output(text: str, max_length: int = LOG_PREVIEW_CHARS) -> str:
    """Shorten text for a log line.

    Only log lines are shortened. Conversation messages and diagnostics
    records keep the full text.
    """
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}... [{len(text) - max_length} more chars]"


class RedactingFilter(logging.Filter):
    """Scrubs credentials from the rendered message of every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        clean = sanitize_for_log(message)
        if clean != message:
            record.msg = clean
            record.args = None
        return True


class RunLogger(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Prefixes every message with ``[<run id> <agent kind>]``."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = self.extra or {}
        return f"[{extra['run_id']} {extra['agent_kind']}] {msg}", kwargs


def get_logger(name: str) -> logging.Logger:
    """Logger for a component, placed under the agentboard tree.

    ``get_logger("runtime")`` and ``get_logger("agentboard.runtime")`` return
    the same logger.
    """
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def run_logger(component: str, run_id: str, agent_kind: str) -> RunLogger:
    """Component logger whose lines carry a run ID and agent kind."""
    return RunLogger(get_logger(component), {"run_id": run_id, "agent_kind": agent_kind})


def setup_logging(
    log_dir: str | Path | None = None,
    level: str | None = None,
    console: bool = True,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> logging.Logger:
    """Send the agentboard logger tree to a rotating file and optionally stderr.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_dir: Directory for the log file. Falls back to AGENTBOARD_LOG_DIR,
            then ./logs.
        level: Level name. Falls back to AGENTBOARD_LOG_LEVEL, then INFO.
            Unknown names mean INFO.
        console: Also log to stderr.
        log_file: File name inside log_dir.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files kept.

    Returns:
        The ``agentboard`` logger.
    """
    directory = Path(log_dir or os.environ.get(LOG_DIR_ENV) or DEFAULT_LOG_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    log_level = logging.getLevelName((level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root = get_logger(ROOT_LOGGER)
    root.setLevel(log_level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    log_path = directory / log_file
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())
        root.addHandler(handler)

    root.info("Logging to %s at %s", log_path, logging.getLevelName(log_level))
    return root
