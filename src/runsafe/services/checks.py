"""Dependency checks for runsafe."""

import shutil


class DependencyError(Exception):
    """Error raised when required executables are missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required commands: {', '.join(missing)}")


def find_missing(requires: list[str] | tuple[str, ...], path: str | None = None) -> list[str]:
    """Return the required executables that cannot be found on PATH.

    Args:
        requires: Executable names (or paths) to look up
        path: Search path override (defaults to $PATH)

    Returns:
        Missing names, in the order given, without duplicates
    """
    missing: list[str] = []
    for name in requires:
        if name in missing:
            continue
        if shutil.which(name, path=path) is None:
            missing.append(name)
    return missing


def check_dependencies(requires: list[str] | tuple[str, ...], path: str | None = None) -> None:
    """Ensure every required executable is available.

    Raises:
        DependencyError: If any executable is missing
    """
    missing = find_missing(requires, path=path)
    if missing:
        raise DependencyError(missing)
