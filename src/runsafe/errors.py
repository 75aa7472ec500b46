"""Error types for runsafe."""

from pathlib import Path

from .constants import EXIT_TASK_FAILED


class RunsafeError(Exception):
    """Base exception for runsafe errors."""


class AlreadyRunningError(RunsafeError):
    """Raised when another live process holds the instance lock."""

    def __init__(self, pid: int, path: Path) -> None:
        self.pid = pid
        self.path = path
        super().__init__(f"Another instance is already running (PID {pid}, lock: {path})")


class LogDirectoryUnavailable(RunsafeError):
    """Raised when the log directory cannot be created or written."""


class RotationFailure(RunsafeError):
    """Raised when a log generation could not be shifted."""


class TaskFailedError(RunsafeError):
    """Raised when the wrapped task fails.

    Attributes:
        returncode: Status code the process should exit with.
        step: Short description of the failing step.
    """

    def __init__(
        self,
        message: str,
        returncode: int = EXIT_TASK_FAILED,
        step: str | None = None,
    ) -> None:
        self.returncode = returncode
        self.step = step
        super().__init__(message)


class ConfigError(RunsafeError):
    """Raised when configuration cannot be loaded or is invalid."""
