"""Log record model."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..constants import LOG_TIMESTAMP_FORMAT


class LogLevel(str, Enum):
    """Severity of a log record."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogRecord(BaseModel):
    """A single leveled log line.

    Attributes:
        timestamp: When the record was created.
        level: Record severity.
        message: Free-form text.
    """

    timestamp: datetime = Field(default_factory=datetime.now)
    level: LogLevel = LogLevel.INFO
    message: str

    def format_line(self) -> str:
        """Render as ``<YYYY-MM-DD HH:MM:SS> [<LEVEL>] : <message>``.

        Line breaks in the message are escaped so a record is always one line.
        """
        stamp = self.timestamp.strftime(LOG_TIMESTAMP_FORMAT)
        text = self.message.replace("\r", "\\r").replace("\n", "\\n")
        return f"{stamp} [{self.level.value}] : {text}"
