"""Core runtime-safety logic for runsafe.

This package contains the pieces wrapped around a user command:
- log_sink: Leveled console/file logging with size-based rotation
- instance_guard: PID marker locking with stale lock recovery
- lifecycle: Acquire, run, release sequencing with signal handling
"""

from .instance_guard import (
    InstanceGuard,
    is_process_alive,
    lock_path_for,
    read_lock,
    safe_name,
)
from .lifecycle import HANDLED_SIGNALS, Lifecycle
from .log_sink import LogSink, backup_path

__all__ = [
    "HANDLED_SIGNALS",
    "InstanceGuard",
    "Lifecycle",
    "LogSink",
    "backup_path",
    "is_process_alive",
    "lock_path_for",
    "read_lock",
    "safe_name",
]
