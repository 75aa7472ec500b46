"""Shared test fixtures for runsafe tests."""

import io
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from runsafe.core import LogSink

FIXED_TIME = datetime(2026, 1, 4, 12, 0, 0)


def make_console() -> Console:
    """Create a plain-text console writing to an in-memory buffer."""
    return Console(file=io.StringIO(), force_terminal=False, color_system=None, width=200)


def console_text(console: Console) -> str:
    """Return everything written to a console made by make_console."""
    assert isinstance(console.file, io.StringIO)
    return console.file.getvalue()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from the real home directory and RUNSAFE_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    for key in (
        "RUNSAFE_ENABLE_LOGGING",
        "RUNSAFE_LOG_DIR",
        "RUNSAFE_LOG_MAX_BYTES",
        "RUNSAFE_LOG_BACKUP_COUNT",
        "RUNSAFE_LOCK_DIR",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def lock_dir(tmp_path: Path) -> Path:
    """Create temporary lock directory."""
    d = tmp_path / "locks"
    d.mkdir()
    return d


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Return a log directory path (not yet created)."""
    return tmp_path / "logs"


@pytest.fixture
def sink_factory() -> Callable[..., LogSink]:
    """Build sinks with in-memory consoles and a fixed clock."""

    def factory(**kwargs) -> LogSink:
        kwargs.setdefault("stdout", make_console())
        kwargs.setdefault("stderr", make_console())
        kwargs.setdefault("clock", lambda: FIXED_TIME)
        return LogSink(**kwargs)

    return factory


@pytest.fixture
def sink(sink_factory: Callable[..., LogSink]) -> LogSink:
    """Console-only sink with in-memory consoles."""
    return sink_factory()
