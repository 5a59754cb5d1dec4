"""Job Runner Adapter - launch and poll jobs on the external agent runtime."""

from agentboard.runtime.base import JobRunner
from agentboard.runtime.exceptions import JobRunnerError, LaunchError, PollError
from agentboard.runtime.http_runner import HttpJobRunner, human_readable_error
from agentboard.runtime.models import JobHandle, JobSpec, JobStatus, JobUpdate
from agentboard.runtime.payload import (
    last_assistant_message,
    map_status,
    normalize_status_payload,
)
from agentboard.runtime.prompts import build_instructions, build_job_spec

__all__ = [
    "HttpJobRunner",
    "JobHandle",
    "JobRunner",
    "JobRunnerError",
    "JobSpec",
    "JobStatus",
    "JobUpdate",
    "LaunchError",
    "PollError",
    "build_instructions",
    "build_job_spec",
    "human_readable_error",
    "last_assistant_message",
    "map_status",
    "normalize_status_payload",
]
