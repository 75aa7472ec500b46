"""Diagnostic logging configuration for runsafe CLI.

These are runsafe's own debug/warning messages. Records about the wrapped
command go through ``runsafe.core.LogSink`` instead.
"""

import logging
from enum import IntEnum

from rich.console import Console
from rich.logging import RichHandler


class Verbosity(IntEnum):
    """Root logger level for each CLI verbosity setting."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


def configure_logging(verbosity: int = 0, quiet: bool = False, no_color: bool = False) -> Console:
    """Configure diagnostic logging from the global CLI flags.

    ``-v`` shows runsafe's debug messages; ``-vv`` adds timestamps and
    source locations. ``--quiet`` wins over any number of ``-v``.

    Returns:
        Rich console on stderr for CLI output
    """
    if quiet:
        level = Verbosity.QUIET
    elif verbosity >= 1:
        level = Verbosity.VERBOSE
    else:
        level = Verbosity.NORMAL

    console = Console(
        stderr=True,
        force_terminal=False if no_color else None,
        no_color=no_color,
    )

    detailed = verbosity >= 2 and not quiet
    handler = RichHandler(console=console, show_time=detailed, show_path=detailed)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    return console
