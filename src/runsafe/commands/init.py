"""Init command implementation."""

import typer

from ..config import default_config_path, write_config_template
from ..output import get_output_context


def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Write a config template to the config path."""
    ctx = get_output_context()
    config_path = ctx.config_path or default_config_path()

    if config_path.exists() and not force:
        ctx.print(f"[yellow]Config already exists:[/yellow] {config_path}")
        ctx.result({"config": str(config_path), "created": False})
        return

    if ctx.dry_run:
        ctx.print(f"[cyan][DRY RUN][/cyan] Would write config: {config_path}")
        return

    write_config_template(config_path)
    ctx.print(f"[green]Created config template:[/green] {config_path}")
    ctx.result({"config": str(config_path), "created": True})
