"""Lifecycle controller: guard, run, clean up.

Sequence for ``Lifecycle.run``:
1. Install SIGINT/SIGTERM handlers and an atexit hook
2. Acquire the instance guard (exit 1 if another instance is live)
3. Check required executables (exit 127 if any is missing)
4. Run the task; its failure is logged once and mapped to an exit code
5. Release the guard and restore the previous signal handlers

While a child process is attached, SIGINT/SIGTERM are forwarded to it and
the guard stays held until the child has been reaped; after
``SIGNALS_BEFORE_KILL`` forwarded signals the child is killed outright.
Without a child the guard is released at once. Either way the default
disposition is then restored and the signal re-delivered, so the process
dies the way it would have without runsafe.
"""

import atexit
import logging
import os
import signal
import subprocess
from collections.abc import Callable, Iterable
from types import FrameType
from typing import Any

from ..constants import (
    EXIT_ALREADY_RUNNING,
    EXIT_MISSING_DEPENDENCY,
    EXIT_OK,
    EXIT_SIGNAL_BASE,
    EXIT_TASK_FAILED,
    SIGNALS_BEFORE_KILL,
)
from ..errors import AlreadyRunningError, RunsafeError, TaskFailedError
from ..services import DependencyError, check_dependencies
from .instance_guard import InstanceGuard
from .log_sink import LogSink

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)

Task = Callable[[], int | None]


class Lifecycle:
    """Runs a task under an instance guard with guaranteed cleanup.

    Attributes:
        guard: Instance guard to hold while the task runs.
        sink: Log sink for lifecycle records.
        requires: Executables that must be on PATH before the task starts.
    """

    def __init__(
        self,
        guard: InstanceGuard,
        sink: LogSink,
        requires: Iterable[str] = (),
        signals: Iterable[signal.Signals] = HANDLED_SIGNALS,
    ) -> None:
        self.guard = guard
        self.sink = sink
        self.requires = tuple(requires)
        self.signals = tuple(signals)
        self._previous: dict[int, Any] = {}
        self._atexit_registered = False
        self._child: subprocess.Popen | None = None
        self._received: int | None = None
        self._signal_count = 0

    def install(self) -> None:
        """Install signal handlers and the atexit release hook."""
        for signum in self.signals:
            try:
                self._previous[signum] = signal.signal(signum, self._handle_signal)
            except ValueError:
                # Not the main thread; rely on atexit and finally blocks
                logger.debug(f"Cannot install handler for {signal.Signals(signum).name}")
        if not self._atexit_registered:
            atexit.register(self.guard.release)
            self._atexit_registered = True

    def uninstall(self) -> None:
        """Restore the handlers that were active before ``install``."""
        for signum, previous in self._previous.items():
            try:
                signal.signal(signum, previous)
            except (ValueError, TypeError):
                logger.debug(f"Cannot restore handler for {signal.Signals(signum).name}")
        self._previous.clear()
        if self._atexit_registered:
            atexit.unregister(self.guard.release)
            self._atexit_registered = False

    def attach(self, process: subprocess.Popen) -> None:
        """Forward handled signals to ``process`` until the task returns."""
        self._child = process

    def _handle_signal(self, signum: int, _frame: FrameType | None) -> None:
        child = self._child
        if child is None or child.returncode is not None:
            self._terminate(signum)
            return

        # Keep the guard until the child is reaped; run() finishes the job
        self._received = signum
        self._signal_count += 1
        name = signal.Signals(signum).name
        if self._signal_count > SIGNALS_BEFORE_KILL:
            self.sink.warn(f"Received {name} again, killing PID {child.pid}")
            forward = signal.SIGKILL
        else:
            self.sink.warn(f"Received {name}, forwarding to PID {child.pid}")
            forward = signum
        try:
            os.kill(child.pid, forward)
        except ProcessLookupError:
            self._terminate(signum)

    def _terminate(self, signum: int) -> None:
        name = signal.Signals(signum).name
        self.sink.error(f"Received {name}, releasing lock and exiting")
        self.guard.release()
        self.uninstall()
        signal.signal(signum, signal.SIG_DFL)
        os.kill(os.getpid(), signum)
        # Only reached if the default action did not terminate us
        raise SystemExit(EXIT_SIGNAL_BASE + signum)

    def run(self, task: Task, step: str = "task") -> int:
        """Run ``task`` under the guard and return the process exit code.

        Args:
            task: Callable returning an exit code (None means 0)
            step: Description of the task used in error records

        Returns:
            0 on success, 1 if another instance is running, 127 if a
            required executable is missing, otherwise the task's status
        """
        self._received = None
        self._signal_count = 0
        self.install()
        try:
            code = self._run(task, step)
        finally:
            self._child = None
            if self._received is not None:
                self._terminate(self._received)
            self.guard.release()
            self.uninstall()
        return code

    def _report(self, message: str) -> None:
        if self._received is not None:
            # The signal path emits the ERROR record for this run
            logger.debug(message)
        else:
            self.sink.error(message)

    def _run(self, task: Task, step: str) -> int:
        try:
            self.guard.acquire()
        except AlreadyRunningError as e:
            self.sink.error(str(e))
            return EXIT_ALREADY_RUNNING
        except RunsafeError as e:
            self.sink.error(str(e))
            return EXIT_TASK_FAILED

        try:
            check_dependencies(self.requires)
        except DependencyError as e:
            self.sink.error(str(e))
            return EXIT_MISSING_DEPENDENCY

        try:
            result = task()
        except TaskFailedError as e:
            where = e.step or step
            self._report(f"{e} (step: {where}, exit code {e.returncode})")
            return e.returncode
        except SystemExit as e:
            code = _system_exit_code(e)
            if code != EXIT_OK:
                self._report(f"{step} exited with status {code}")
            return code
        except Exception as e:
            logger.debug("Task failed", exc_info=True)
            self._report(f"{step} failed: {type(e).__name__}: {e}")
            return EXIT_TASK_FAILED

        code = EXIT_OK if result is None else int(result)
        if code != EXIT_OK:
            self._report(f"{step} returned status {code}")
        return code


def _system_exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return EXIT_OK
    if isinstance(exc.code, int):
        return exc.code
    return EXIT_TASK_FAILED
