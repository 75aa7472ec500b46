"""Leveled log sink with size-based rotation.

Every record goes to the console (stderr for ERROR, stdout otherwise).
When persistence is enabled the line is also appended to the current log
file, and the file is rotated once it grows past ``max_bytes``:

    current -> current.1 -> current.2 -> ... -> current.<backup_count>

The generation beyond ``backup_count`` is overwritten and so discarded.
Filesystem errors never propagate out of ``log``; they degrade to console
output for that call.
"""

import logging
import os
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..config import resolve_log_directory
from ..constants import DEFAULT_BACKUP_COUNT, DEFAULT_MAX_BYTES, LOG_SUFFIX
from ..errors import LogDirectoryUnavailable, RotationFailure
from ..models import LogLevel, LogRecord

logger = logging.getLogger(__name__)

DEFAULT_LOG_NAME = f"runsafe{LOG_SUFFIX}"


def backup_path(current: Path, index: int) -> Path:
    """Get path of rotated generation ``index`` (1 = most recent)."""
    return current.with_name(f"{current.name}.{index}")


def _emit(console: Console, line: str) -> None:
    try:
        console.print(line, markup=False, highlight=False, emoji=False, soft_wrap=True)
    except OSError as e:
        # Closed pipe or terminal; the file copy (if any) is still written
        logger.debug(f"Console write failed: {e}")


class LogSink:
    """Process-wide log destination.

    Attributes:
        stdout: Console for non-error records.
        stderr: Console for ERROR records and degraded output.
        enabled: Whether records are persisted to disk.
        directory: Directory holding the log generations.
        max_bytes: Size threshold that triggers rotation.
        backup_count: Number of rotated generations kept.
        verbose: Whether DEBUG records are emitted.
        quiet: Whether non-error records are kept off the console.
    """

    def __init__(
        self,
        stdout: Console | None = None,
        stderr: Console | None = None,
        clock: Callable[[], datetime] | None = None,
        verbose: bool = False,
        quiet: bool = False,
    ) -> None:
        self.stdout = stdout or Console(soft_wrap=True)
        self.stderr = stderr or Console(stderr=True, soft_wrap=True)
        self._clock = clock or datetime.now
        self.verbose = verbose
        self.quiet = quiet
        self.enabled = False
        self.directory: Path | None = None
        self.filename = DEFAULT_LOG_NAME
        self.max_bytes = DEFAULT_MAX_BYTES
        self.backup_count = DEFAULT_BACKUP_COUNT

    def configure(
        self,
        enabled: bool = False,
        directory: Path | None = None,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
        filename: str | None = None,
    ) -> None:
        """Set persistence options for every following ``log`` call.

        An explicit ``directory`` turns persistence on.

        Args:
            enabled: Persist records to disk
            directory: Log directory override
            max_bytes: Rotate once the current file is larger than this
            backup_count: Rotated generations to keep (at least 1)
            filename: Base name of the current log file

        Raises:
            ValueError: If max_bytes or backup_count is out of range
        """
        if max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {max_bytes}")
        if backup_count < 1:
            raise ValueError(f"backup_count must be at least 1, got {backup_count}")

        if directory is not None:
            enabled = True
        self.enabled = enabled
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        if filename:
            self.filename = filename
        self.directory = resolve_log_directory(directory) if enabled else directory
        logger.debug(
            f"Log sink configured: enabled={self.enabled} directory={self.directory} "
            f"max_bytes={max_bytes} backup_count={backup_count}"
        )

    def shutdown(self) -> None:
        """Stop persisting records."""
        self.enabled = False

    @property
    def current_path(self) -> Path | None:
        """Path of the current log generation, if persistence is set up."""
        if self.directory is None:
            return None
        return self.directory / self.filename

    def debug(self, message: str) -> None:
        self.log(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def warn(self, message: str) -> None:
        self.log(LogLevel.WARN, message)

    def error(self, message: str) -> None:
        self.log(LogLevel.ERROR, message)

    def log(self, level: LogLevel, message: str) -> None:
        """Emit a record to the console and, if enabled, to the log file.

        Never raises for filesystem or console problems. In quiet mode only
        ERROR records reach the console; the file still gets every record.
        """
        if level == LogLevel.DEBUG and not self.verbose:
            return

        line = LogRecord(timestamp=self._clock(), level=level, message=message).format_line()
        if level == LogLevel.ERROR:
            _emit(self.stderr, line)
        elif not self.quiet:
            _emit(self.stdout, line)

        if not self.enabled or self.current_path is None:
            return

        try:
            self._ensure_directory()
            self._append(line)
        except LogDirectoryUnavailable as e:
            logger.debug(str(e))
            self._degrade(level, line)
            return
        except OSError as e:
            logger.debug(f"Could not append to {self.current_path}: {e}")
            self._degrade(level, line)
            return

        self._maybe_rotate()

    def _degrade(self, level: LogLevel, line: str) -> None:
        # ERROR lines already went to stderr
        if level != LogLevel.ERROR:
            _emit(self.stderr, line)

    def _ensure_directory(self) -> None:
        assert self.directory is not None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LogDirectoryUnavailable(
                f"Cannot create log directory {self.directory}: {e}"
            ) from e

    def _append(self, line: str) -> None:
        assert self.current_path is not None
        with open(self.current_path, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    def _maybe_rotate(self) -> None:
        current = self.current_path
        assert current is not None
        try:
            size = current.stat().st_size
        except OSError:
            return
        if size <= self.max_bytes:
            return

        note = LogRecord(
            timestamp=self._clock(),
            level=LogLevel.INFO,
            message=f"Log file exceeded {self.max_bytes} bytes, rotating",
        ).format_line()
        try:
            self._append(note)
            self.rotate()
        except (OSError, RotationFailure) as e:
            _emit(self.stderr, f"Log rotation failed: {e}")

    def rotate(self) -> None:
        """Shift backups up by one and start an empty current file.

        Stops at the first failed rename so no generation is overwritten
        by a partial shift.

        Raises:
            RotationFailure: If a rename or the truncate fails
        """
        current = self.current_path
        if current is None:
            return

        for i in range(self.backup_count - 1, 0, -1):
            src = backup_path(current, i)
            if not src.exists():
                continue
            dst = backup_path(current, i + 1)
            try:
                os.replace(src, dst)
            except OSError as e:
                raise RotationFailure(f"Cannot rename {src} to {dst}: {e}") from e

        try:
            os.replace(current, backup_path(current, 1))
        except OSError as e:
            raise RotationFailure(f"Cannot rename {current}: {e}") from e

        try:
            current.touch()
        except OSError as e:
            raise RotationFailure(f"Cannot create {current}: {e}") from e
        logger.debug(f"Rotated {current}")
