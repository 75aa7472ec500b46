"""Tests for dependency checks and the command runner."""

import signal
import subprocess
import sys
from pathlib import Path

import pytest

from runsafe.errors import TaskFailedError
from runsafe.services import (
    DependencyError,
    check_dependencies,
    describe,
    find_missing,
    run_command,
)


class TestFindMissing:
    """Tests for find_missing function."""

    def test_present_executable(self) -> None:
        assert find_missing([sys.executable]) == []

    def test_missing_executable(self) -> None:
        assert find_missing(["no-such-tool-xyz"]) == ["no-such-tool-xyz"]

    def test_order_and_duplicates(self) -> None:
        missing = find_missing(["b-missing", sys.executable, "a-missing", "b-missing"])
        assert missing == ["b-missing", "a-missing"]

    def test_custom_search_path(self, tmp_path: Path) -> None:
        tool = tmp_path / "mytool"
        tool.write_text("#!/bin/sh\n")
        tool.chmod(0o755)
        assert find_missing(["mytool"], path=str(tmp_path)) == []
        assert find_missing(["mytool"], path=str(tmp_path / "empty")) == ["mytool"]


class TestCheckDependencies:
    """Tests for check_dependencies function."""

    def test_all_present(self) -> None:
        check_dependencies([sys.executable])

    def test_missing_raises_with_names(self) -> None:
        with pytest.raises(DependencyError, match="no-such-tool-xyz") as exc_info:
            check_dependencies(["no-such-tool-xyz"])
        assert exc_info.value.missing == ["no-such-tool-xyz"]


class TestRunCommand:
    """Tests for run_command function."""

    def test_success_returns_zero(self) -> None:
        assert run_command([sys.executable, "-c", "pass"]) == 0

    def test_exit_code_matches_exactly(self) -> None:
        for expected in [1, 42, 255]:
            with pytest.raises(TaskFailedError) as exc_info:
                run_command([sys.executable, "-c", f"raise SystemExit({expected})"])
            assert exc_info.value.returncode == expected
            assert exc_info.value.step is not None

    def test_missing_command_is_127(self) -> None:
        with pytest.raises(TaskFailedError, match="Command not found") as exc_info:
            run_command(["no-such-command-xyz"])
        assert exc_info.value.returncode == 127

    def test_not_executable_is_126(self, tmp_path: Path) -> None:
        script = tmp_path / "script.sh"
        script.write_text("#!/bin/sh\n")
        script.chmod(0o644)
        with pytest.raises(TaskFailedError) as exc_info:
            run_command([str(script)])
        assert exc_info.value.returncode == 126

    def test_empty_command(self) -> None:
        with pytest.raises(TaskFailedError, match="No command"):
            run_command([])

    def test_killed_by_signal_maps_to_shell_status(self) -> None:
        code = "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"
        with pytest.raises(TaskFailedError) as exc_info:
            run_command([sys.executable, "-c", code])
        assert exc_info.value.returncode == 128 + signal.SIGTERM

    def test_on_start_receives_child_process(self) -> None:
        started: list[subprocess.Popen] = []
        run_command([sys.executable, "-c", "pass"], on_start=started.append)
        assert len(started) == 1
        assert started[0].pid > 0
        assert started[0].returncode == 0

    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        run_command([sys.executable, "-c", "open('marker', 'w').close()"], cwd=tmp_path)
        assert (tmp_path / "marker").exists()


def test_describe_quotes_arguments():
    assert describe(["echo", "hello world"]) == "echo 'hello world'"
