"""Single-instance guard.

Provides PID-based marker-file locking so that at most one process per
tool identity runs on a host. Includes stale lock detection for crash
recovery: a marker whose PID is no longer alive is removed by the next
process that tries to acquire it.

Uses atomic file creation (O_CREAT | O_EXCL) to prevent TOCTOU races.
"""

import contextlib
import logging
import os
import re
import tempfile
import time
from pathlib import Path

from ..constants import LOCK_RETRY_DELAY, LOCK_SUFFIX, LOCK_WRITE_GRACE, MAX_LOCK_RETRIES
from ..errors import AlreadyRunningError, RunsafeError
from ..models import LockRecord
from .log_sink import LogSink

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_name(identity: str) -> str:
    """Turn a tool identity into a file-name-safe stem."""
    return _UNSAFE_CHARS.sub("_", identity).strip("._") or "runsafe"


def lock_path_for(identity: str, directory: Path | None = None) -> Path:
    """Get path to the lock marker for a tool identity.

    Args:
        identity: Tool name; characters unsafe in file names become ``_``
        directory: Lock directory (defaults to the system temp dir)

    Returns:
        ``<directory>/<identity>.lock``
    """
    base = directory or Path(tempfile.gettempdir())
    return base / f"{safe_name(identity)}{LOCK_SUFFIX}"


def is_process_alive(pid: int) -> bool:
    """Check if a process with given PID is running."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)  # Signal 0 doesn't kill, just checks
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but belongs to another user
        return True
    except OSError:
        return False
    return True


def read_lock(path: Path) -> LockRecord | None:
    """Read the lock marker at ``path``.

    Returns:
        LockRecord if a well-formed marker exists, None otherwise
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        return None

    try:
        return LockRecord.from_marker(path, content)
    except ValueError:
        # Corrupted marker - treat as no lock
        return None


def _marker_age(path: Path) -> float:
    """Seconds since the marker was last modified (0 if it cannot be stat'ed)."""
    try:
        return max(0.0, time.time() - path.stat().st_mtime)
    except OSError:
        return 0.0


def _try_atomic_create(record: LockRecord) -> bool:
    """Attempt atomic marker creation.

    Returns:
        True if the marker was created, False if it already exists
    """
    try:
        fd = os.open(str(record.path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError:
        return False
    try:
        os.write(fd, record.to_marker().encode())
    finally:
        os.close(fd)
    return True


class InstanceGuard:
    """Exclusive execution rights for one tool identity.

    Example:
        >>> guard = InstanceGuard("backup", sink)
        >>> with guard:
        ...     do_backup()
    """

    def __init__(self, identity: str, sink: LogSink, lock_dir: Path | None = None) -> None:
        self.identity = identity
        self.sink = sink
        self.path = lock_path_for(identity, lock_dir)
        self._record: LockRecord | None = None

    @property
    def held(self) -> bool:
        """Whether this guard currently owns the marker."""
        return self._record is not None

    def acquire(self) -> LockRecord:
        """Acquire the instance lock.

        Returns:
            The LockRecord written for this process

        Raises:
            AlreadyRunningError: If a live process holds the lock
            RunsafeError: If the marker could not be created
        """
        record = LockRecord(pid=os.getpid(), path=self.path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RunsafeError(f"Cannot create lock directory {self.path.parent}: {e}") from e

        for _ in range(MAX_LOCK_RETRIES):
            try:
                created = _try_atomic_create(record)
            except OSError as e:
                raise RunsafeError(f"Cannot create lock {self.path}: {e}") from e
            if created:
                self._record = record
                self.sink.info(f"Acquired lock {self.path} (PID {record.pid})")
                return record

            existing = read_lock(self.path)
            if existing is None and not self.path.exists():
                # Released between our create attempt and the read
                continue
            if existing is not None and existing.pid == record.pid:
                # Re-entrant acquire by the same process
                self._record = existing
                return existing

            if existing is not None and is_process_alive(existing.pid):
                raise AlreadyRunningError(existing.pid, self.path)

            if existing is None and _marker_age(self.path) < LOCK_WRITE_GRACE:
                # Another process may have created it and not written its PID yet
                logger.debug(f"Lock {self.path} is unreadable but fresh, retrying")
                time.sleep(LOCK_RETRY_DELAY)
                continue

            if existing is None:
                self.sink.info(f"Removing unreadable lock {self.path}")
            else:
                self.sink.info(
                    f"Removing stale lock {self.path} (PID {existing.pid} is not running)"
                )
            with contextlib.suppress(FileNotFoundError):
                self.path.unlink()

        raise RunsafeError(
            f"Failed to acquire lock {self.path} after {MAX_LOCK_RETRIES} attempts"
        )

    def release(self) -> None:
        """Release the lock if owned by the current process.

        Safe to call more than once, and before ``acquire``.
        """
        if self._record is None:
            return
        self._record = None

        existing = read_lock(self.path)
        if existing is None or existing.pid != os.getpid():
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            self.sink.warn(f"Could not remove lock {self.path}: {e}")
            return
        self.sink.info(f"Released lock {self.path}")

    def __enter__(self) -> "InstanceGuard":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
