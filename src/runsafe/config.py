"""Configuration management for runsafe."""

import os
import tempfile
import tomllib
from collections.abc import Mapping
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError

from .constants import DEFAULT_BACKUP_COUNT, DEFAULT_MAX_BYTES, ENV_PREFIX
from .errors import ConfigError

CONFIG_FILENAME = "config.toml"
APP_DIRNAME = "runsafe"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class LoggingConfig(BaseModel):
    """Persistent log settings.

    Setting ``directory`` implies ``enabled``; see LogSink.configure.
    """

    enabled: bool = False
    directory: Path | None = None  # None = per-user default
    filename: str | None = None  # None = "<identity>.log"
    max_bytes: int = Field(default=DEFAULT_MAX_BYTES, gt=0)
    backup_count: int = Field(default=DEFAULT_BACKUP_COUNT, ge=1)


class LockConfig(BaseModel):
    """Instance lock settings."""

    directory: Path | None = None  # None = system temp dir


class RunConfig(BaseModel):
    """Settings for the wrapped command."""

    requires: list[str] = Field(
        default_factory=list, description="Executables that must be on PATH"
    )


class RunsafeConfig(BaseModel):
    """Root configuration for runsafe."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    lock: LockConfig = Field(default_factory=LockConfig)
    run: RunConfig = Field(default_factory=RunConfig)


def default_config_path() -> Path:
    """Get the per-user config file location.

    Honours ``XDG_CONFIG_HOME`` and falls back to ``~/.config``.
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / APP_DIRNAME / CONFIG_FILENAME


def default_log_directory() -> Path:
    """Get the per-user default log directory."""
    return Path.home() / ".local" / "log"


def resolve_log_directory(preferred: Path | None = None) -> Path:
    """Pick a usable log directory.

    Tries ``preferred`` (or the per-user default), creating it if needed.
    Falls back to the system temporary directory when that fails or the
    directory is not writable.

    Args:
        preferred: Directory to try first

    Returns:
        A directory that exists and is writable, as far as can be told now
    """
    candidate = preferred or default_log_directory()
    try:
        candidate.mkdir(parents=True, exist_ok=True)
    except OSError:
        return Path(tempfile.gettempdir())
    if not os.access(candidate, os.W_OK):
        return Path(tempfile.gettempdir())
    return candidate


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def apply_env_overrides(
    config: RunsafeConfig, environ: Mapping[str, str] | None = None
) -> RunsafeConfig:
    """Apply ``RUNSAFE_*`` environment variables on top of a config.

    Recognised variables:
        RUNSAFE_ENABLE_LOGGING, RUNSAFE_LOG_DIR, RUNSAFE_LOG_MAX_BYTES,
        RUNSAFE_LOG_BACKUP_COUNT, RUNSAFE_LOCK_DIR

    Args:
        config: Base configuration (not modified)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        New configuration with overrides applied

    Raises:
        ConfigError: If a variable holds an invalid value
    """
    env = os.environ if environ is None else environ
    data = config.model_dump()

    key = f"{ENV_PREFIX}ENABLE_LOGGING"
    if key in env:
        data["logging"]["enabled"] = _parse_bool(key, env[key])

    key = f"{ENV_PREFIX}LOG_DIR"
    if env.get(key):
        data["logging"]["directory"] = Path(env[key]).expanduser()

    key = f"{ENV_PREFIX}LOG_MAX_BYTES"
    if env.get(key):
        data["logging"]["max_bytes"] = _parse_int(key, env[key])

    key = f"{ENV_PREFIX}LOG_BACKUP_COUNT"
    if env.get(key):
        data["logging"]["backup_count"] = _parse_int(key, env[key])

    key = f"{ENV_PREFIX}LOCK_DIR"
    if env.get(key):
        data["lock"]["directory"] = Path(env[key]).expanduser()

    try:
        return RunsafeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid environment override: {e}") from e


def load_config(config_path: Path | None = None) -> RunsafeConfig:
    """Load config from a TOML file.

    Args:
        config_path: Path to config.toml (defaults to the per-user location)

    Returns:
        Loaded configuration, or defaults if the file doesn't exist

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid values
    """
    path = config_path or default_config_path()
    if not path.exists():
        return RunsafeConfig()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    try:
        return RunsafeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def write_config_template(config_path: Path) -> Path:
    """Write default config.toml template.

    Args:
        config_path: Destination file

    Returns:
        Path to the written config file
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    template = {
        "logging": {
            "enabled": False,
            "max_bytes": DEFAULT_MAX_BYTES,
            "backup_count": DEFAULT_BACKUP_COUNT,
        },
        "lock": {},
        # Executables checked with `which` before the command starts
        "run": {"requires": []},
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
