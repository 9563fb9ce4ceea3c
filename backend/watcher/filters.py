"""
LessWatch Path Filters.

Decides which paths are watched and which are compiled directly.
Requires Python 3.11+.
"""

import os
from pathlib import Path

from utils.config import WatchConfig

PARTIAL_PREFIX = "_"


class PathFilter:
    """
    Path rules derived from the run configuration.

    Watched files have an allowed extension, no dot-prefixed component
    below the watch root, and do not live in an output folder nested
    inside the watch root.
    Compilable files are watched files that are not underscore partials
    (unless hidden files are included).
    """

    def __init__(self, config: WatchConfig) -> None:
        self._root = config.watch_folder
        self._output = config.output_folder
        self._extensions = tuple(ext.lower() for ext in config.allowed_extensions)
        self._include_hidden = config.include_hidden

    def _relative_parts(self, path: Path) -> tuple[str, ...] | None:
        try:
            return Path(os.path.normpath(path)).relative_to(self._root).parts
        except ValueError:
            return None

    def _in_output(self, path: Path) -> bool:
        # Only an output folder nested below the watch root hides files
        if self._output == self._root or not self._output.is_relative_to(self._root):
            return False
        return Path(os.path.normpath(path)).is_relative_to(self._output)

    def is_watched(self, path: Path) -> bool:
        """Check if changes to a path are of interest."""
        parts = self._relative_parts(path)
        if not parts:
            return False
        if any(part.startswith(".") for part in parts):
            return False
        if self._in_output(path):
            return False
        return path.suffix.lower() in self._extensions

    def is_compilable(self, path: Path) -> bool:
        """Check if a path may be compiled on its own."""
        if not self.is_watched(path):
            return False
        return self._include_hidden or not path.name.startswith(PARTIAL_PREFIX)

    def iter_sources(self) -> list[Path]:
        """List every compilable file under the watch root, sorted."""
        sources: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(self._root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith(".") and not self._in_output(current / d)
            )
            for name in sorted(filenames):
                path = current / name
                if self.is_compilable(path):
                    sources.append(path)
        return sources
