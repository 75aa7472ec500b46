"""External command runner for runsafe."""

import shlex
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from ..constants import EXIT_MISSING_DEPENDENCY, EXIT_NOT_EXECUTABLE, EXIT_SIGNAL_BASE
from ..errors import TaskFailedError

StartHook = Callable[[subprocess.Popen], None]


def describe(argv: Sequence[str]) -> str:
    """Render argv as a shell-quoted string for log messages."""
    return shlex.join(argv)


def run_command(
    argv: Sequence[str],
    cwd: Path | None = None,
    on_start: StartHook | None = None,
) -> int:
    """Run a command with inherited stdio and return its exit code.

    Args:
        argv: Command and arguments
        cwd: Working directory
        on_start: Called with the child process right after it is spawned,
            so a caller can forward signals to it

    Returns:
        0 on success

    Raises:
        TaskFailedError: If the command is empty, cannot be started, or
            exits non-zero. ``returncode`` carries the status to exit with.
    """
    if not argv:
        raise TaskFailedError("No command given", returncode=EXIT_MISSING_DEPENDENCY)

    step = describe(argv)
    try:
        process = subprocess.Popen(list(argv), cwd=cwd)
    except FileNotFoundError:
        raise TaskFailedError(
            f"Command not found: {argv[0]}", returncode=EXIT_MISSING_DEPENDENCY, step=step
        ) from None
    except PermissionError as e:
        raise TaskFailedError(
            f"Command not executable: {argv[0]} ({e})",
            returncode=EXIT_NOT_EXECUTABLE,
            step=step,
        ) from None

    if on_start is not None:
        on_start(process)
    returncode = process.wait()

    if returncode != 0:
        raise TaskFailedError(
            f"Command exited with status {returncode}",
            returncode=_exit_status(returncode),
            step=step,
        )
    return 0


def _exit_status(returncode: int) -> int:
    # subprocess reports death-by-signal N as -N; shells report 128+N
    if returncode < 0:
        return EXIT_SIGNAL_BASE - returncode
    return returncode
