"""Lock model for single-instance execution.

The on-disk marker holds only the owner's PID as decimal text, one line,
so it stays readable by ``cat`` and by other tools that use PID files.
"""

from pathlib import Path

from pydantic import BaseModel, Field


class LockRecord(BaseModel):
    """Instance lock written to ``<lock_dir>/<identity>.lock``.

    Attributes:
        pid: Process ID of the lock holder.
        path: Location of the lock marker.
    """

    pid: int = Field(gt=0, description="Process ID holding the lock")
    path: Path = Field(description="Lock marker location")

    def to_marker(self) -> str:
        """Render marker file content."""
        return f"{self.pid}\n"

    @classmethod
    def from_marker(cls, path: Path, text: str) -> "LockRecord":
        """Parse marker file content.

        Raises:
            ValueError: If the content is not a positive decimal PID
        """
        lines = text.strip().splitlines()
        if not lines:
            raise ValueError(f"Empty lock marker: {path}")
        return cls(pid=int(lines[0].strip()), path=path)
