"""Config loading shared by commands."""

import typer

from ..config import RunsafeConfig, apply_env_overrides, load_config
from ..constants import EXIT_CONFIG_ERROR
from ..errors import ConfigError
from ..output import OutputContext


def load_effective_config(ctx: OutputContext) -> RunsafeConfig:
    """Load config file plus environment overrides, exiting on errors."""
    try:
        return apply_env_overrides(load_config(ctx.config_path))
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(EXIT_CONFIG_ERROR) from None
