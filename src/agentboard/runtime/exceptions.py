"""Custom exceptions for the Job Runner Adapter."""


class JobRunnerError(Exception):
    """Base exception for Job Runner errors."""


class LaunchError(JobRunnerError):
    """The agent runtime rejected or could not accept a job.

    Not retried: configuration problems do not fix themselves.
    """


class PollError(JobRunnerError):
    """A poll failed at the transport level and may succeed if retried."""
