"""Run command implementation."""

from pathlib import Path

import typer

from ..constants import EXIT_CONFIG_ERROR, LOG_SUFFIX
from ..core import InstanceGuard, Lifecycle, LogSink, lock_path_for, safe_name
from ..output import get_output_context
from ..services import describe, run_command
from ._config import load_effective_config


def run(
    command: list[str] = typer.Argument(..., help="Command to run, e.g. -- rsync -a src dst"),
    name: str | None = typer.Option(
        None, "--name", "-n", help="Tool identity (defaults to the command's basename)"
    ),
    log: bool | None = typer.Option(
        None, "--log/--no-log", help="Persist records to a rotating log file"
    ),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Log directory (implies --log)"
    ),
    max_bytes: int | None = typer.Option(
        None, "--max-bytes", min=1, help="Rotate the log once it exceeds this size"
    ),
    backup_count: int | None = typer.Option(
        None, "--backup-count", min=1, help="Rotated log files to keep"
    ),
    lock_dir: Path | None = typer.Option(None, "--lock-dir", help="Lock directory override"),
    require: list[str] | None = typer.Option(
        None, "--require", "-r", help="Executable that must be on PATH (repeatable)"
    ),
) -> None:
    """Run COMMAND as the only instance of its identity.

    Exits with COMMAND's exit code, 1 if another instance is running,
    or 127 if a required executable is missing.
    """
    ctx = get_output_context()
    config = load_effective_config(ctx)

    identity = name or Path(command[0]).name
    log_cfg = config.logging

    if log is False:
        # Explicit --no-log wins over any configured directory
        enabled, directory = False, None
    else:
        directory = log_dir or log_cfg.directory
        enabled = bool(log) or log_cfg.enabled or directory is not None

    filename = log_cfg.filename or f"{safe_name(identity)}{LOG_SUFFIX}"
    effective_max_bytes = max_bytes or log_cfg.max_bytes
    effective_backups = backup_count or log_cfg.backup_count
    effective_lock_dir = lock_dir or config.lock.directory
    requires = [*config.run.requires, *(require or [])]

    if ctx.dry_run:
        ctx.console.print(f"[cyan][DRY RUN][/cyan] Would run: {describe(command)}")
        ctx.console.print(f"  Identity: {identity}")
        ctx.console.print(f"  Lock: {lock_path_for(identity, effective_lock_dir)}")
        if enabled:
            where = directory or "default log directory"
            ctx.console.print(
                f"  Log: {where}/{filename} "
                f"(max {effective_max_bytes} bytes, {effective_backups} backups)"
            )
        else:
            ctx.console.print("  Log: console only")
        if requires:
            ctx.console.print(f"  Requires: {', '.join(requires)}")
        return

    sink = LogSink(verbose=ctx.verbose, quiet=ctx.quiet)
    try:
        sink.configure(
            enabled=enabled,
            directory=directory,
            max_bytes=effective_max_bytes,
            backup_count=effective_backups,
            filename=filename,
        )
    except ValueError as e:
        ctx.error(str(e))
        raise typer.Exit(EXIT_CONFIG_ERROR) from None

    guard = InstanceGuard(identity, sink, effective_lock_dir)
    lifecycle = Lifecycle(guard, sink, requires=requires)

    step = describe(command)
    sink.debug(f"Starting {step}")
    code = lifecycle.run(lambda: run_command(command, on_start=lifecycle.attach), step=step)
    if code == 0:
        sink.debug(f"Finished {step}")
    sink.shutdown()
    raise typer.Exit(code)
