"""runsafe CLI: run a command as a single guarded instance."""

from pathlib import Path

import typer

from runsafe import __version__

from .commands import init, run, status
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"runsafe {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="runsafe",
    help="Run a command as the only instance, with rotating logs and guaranteed cleanup",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be done without doing it",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: ~/.config/runsafe/config.toml)",
    ),
) -> None:
    """runsafe - single-instance command runner."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
    )
    set_output_context(
        OutputContext(
            console=console,
            json_mode=json_output,
            dry_run=dry_run,
            verbose=verbose > 0 and not quiet,
            quiet=quiet,
            config_path=config,
        )
    )


app.command("run", context_settings={"allow_interspersed_args": False})(run)
app.command("status")(status)
app.command("init")(init)


if __name__ == "__main__":
    app()
