"""External process integrations for runsafe.

This package provides interfaces to things outside the Python process:
- checks: Required executable lookup on PATH
- runner: Wrapped command execution
"""

from .checks import DependencyError, check_dependencies, find_missing
from .runner import describe, run_command

__all__ = [
    "DependencyError",
    "check_dependencies",
    "describe",
    "find_missing",
    "run_command",
]
