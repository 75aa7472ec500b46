"""Pydantic data models for runsafe.

This package defines the data structures shared by the guard and the sink:
- Instance lock marker (LockRecord)
- Leveled log lines (LogLevel, LogRecord)

Example:
    >>> from runsafe.models import LogLevel, LogRecord
    >>> LogRecord(level=LogLevel.WARN, message="disk almost full").format_line()
"""

from .lock import LockRecord
from .log_record import LogLevel, LogRecord

__all__ = [
    "LockRecord",
    "LogLevel",
    "LogRecord",
]
