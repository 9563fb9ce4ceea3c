"""
LessWatch Exceptions.

Fatal startup errors. Compile errors are reported as values, not raised.
Requires Python 3.11+.
"""

from pathlib import Path


class LessWatchError(Exception):
    """Base class for LessWatch errors."""


class StartupConfigError(LessWatchError):
    """Raised when the run configuration is missing or invalid."""


class MissingArgumentsError(StartupConfigError):
    """Raised when the watch or output folder is not given."""


class MainFileMissingError(LessWatchError):
    """Raised when the configured main file does not exist at startup."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Main file {path} does not exist.")
        self.path = path


__all__ = ["LessWatchError", "StartupConfigError", "MissingArgumentsError", "MainFileMissingError"]
