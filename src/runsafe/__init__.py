"""runsafe: single-instance command runner with rotating logs."""

__version__ = "0.1.0"
