"""Runtime configuration for agentboard."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from agentboard.orchestrator.models import PollPolicy

DEFAULT_DB_PATH = "agentboard.db"
DEFAULT_RUNTIME_URL = "https://api.cursor.com"
DEFAULT_BRANCH = "main"
DEFAULT_POLL_INTERVAL = 4.0
DEFAULT_RUN_TIMEOUT = 30 * 60.0
DEFAULT_MAX_POLL_RETRIES = 3
DEFAULT_DEDUP_WINDOW = 5.0


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass
class Settings:
    """Settings for the orchestration core and its collaborators.

    Attributes:
        db_path: SQLite database file for the ticket store.
        runtime_base_url: Base URL of the external agent runtime.
        runtime_api_key: API key for the agent runtime (empty = not configured).
        repository_url: Repository the agent runtime works against.
        default_branch: Branch the agent runtime starts from.
        poll_interval: Seconds between two polls of a running job.
        run_timeout: Wall-clock budget in seconds for one run's polling.
        max_poll_retries: Consecutive transport failures tolerated while polling.
        dedup_window: Seconds during which an identical trigger is rejected.
    """

    db_path: str = DEFAULT_DB_PATH
    runtime_base_url: str = DEFAULT_RUNTIME_URL
    runtime_api_key: str = ""
    repository_url: str = ""
    default_branch: str = DEFAULT_BRANCH
    poll_interval: float = DEFAULT_POLL_INTERVAL
    run_timeout: float = DEFAULT_RUN_TIMEOUT
    max_poll_retries: int = DEFAULT_MAX_POLL_RETRIES
    dedup_window: float = DEFAULT_DEDUP_WINDOW

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ConfigError("poll_interval must be > 0")
        if self.run_timeout <= 0:
            raise ConfigError("run_timeout must be > 0")
        if self.max_poll_retries < 0:
            raise ConfigError("max_poll_retries must be >= 0")
        if self.dedup_window < 0:
            raise ConfigError("dedup_window must be >= 0")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from AGENTBOARD_* environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If a numeric variable cannot be parsed or is out of range.
        """
        env = os.environ if environ is None else environ
        api_key = env.get("AGENTBOARD_RUNTIME_API_KEY") or env.get("CURSOR_API_KEY", "")
        return cls(
            db_path=env.get("AGENTBOARD_DB_PATH", DEFAULT_DB_PATH),
            runtime_base_url=env.get("AGENTBOARD_RUNTIME_URL", DEFAULT_RUNTIME_URL),
            runtime_api_key=api_key.strip(),
            repository_url=env.get("AGENTBOARD_REPOSITORY_URL", "").strip(),
            default_branch=env.get("AGENTBOARD_DEFAULT_BRANCH", DEFAULT_BRANCH),
            poll_interval=_number(env, "AGENTBOARD_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            run_timeout=_number(env, "AGENTBOARD_RUN_TIMEOUT", DEFAULT_RUN_TIMEOUT),
            max_poll_retries=int(
                _number(env, "AGENTBOARD_MAX_POLL_RETRIES", DEFAULT_MAX_POLL_RETRIES)
            ),
            dedup_window=_number(env, "AGENTBOARD_DEDUP_WINDOW", DEFAULT_DEDUP_WINDOW),
        )

    def poll_policy(self) -> PollPolicy:
        """Build the orchestrator poll policy from these settings."""
        from agentboard.orchestrator.models import PollPolicy  # noqa: PLC0415

        return PollPolicy(
            interval=self.poll_interval,
            timeout=self.run_timeout,
            max_retries=self.max_poll_retries,
        )


def _number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return float(default)
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
