"""Status command for lock inspection."""

from pathlib import Path

import typer

from ..constants import EXIT_ALREADY_RUNNING
from ..core import is_process_alive, lock_path_for, read_lock
from ..output import get_output_context
from ._config import load_effective_config


def status(
    name: str = typer.Option(..., "--name", "-n", help="Tool identity to inspect"),
    lock_dir: Path | None = typer.Option(None, "--lock-dir", help="Lock directory override"),
) -> None:
    """Show whether an instance of NAME is running.

    Exits 1 if a live process holds the lock, 0 otherwise.
    """
    ctx = get_output_context()
    config = load_effective_config(ctx)
    path = lock_path_for(name, lock_dir or config.lock.directory)

    record = read_lock(path)
    if record is None and not path.exists():
        state, pid = "free", None
    elif record is None:
        state, pid = "stale", None
    elif is_process_alive(record.pid):
        state, pid = "held", record.pid
    else:
        state, pid = "stale", record.pid

    data = {"name": name, "lock": str(path), "state": state, "pid": pid}
    if state == "held":
        ctx.result(data, f"[yellow]{name}[/yellow] is running (PID {pid}, lock: {path})")
        raise typer.Exit(EXIT_ALREADY_RUNNING)
    if state == "stale":
        owner = f"PID {pid}" if pid else "unreadable marker"
        ctx.result(data, f"[dim]{name}[/dim] is not running (stale lock, {owner}: {path})")
    else:
        ctx.result(data, f"[green]{name}[/green] is not running")
