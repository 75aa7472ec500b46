"""CLI command implementations for runsafe.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .init import init
from .run import run
from .status import status

__all__ = [
    "init",
    "run",
    "status",
]
