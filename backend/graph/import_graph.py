"""
LessWatch Import Graph.

Tracks which source files import which other source files.
Requires Python 3.11+.
"""

import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from compiler.path_resolver import DEFAULT_EXTENSION, normalize_source_path, resolve_import
from utils.logger import LoggerMixin


class ImportGraph(LoggerMixin):
    """
    Direct import edges between source files.

    Keys are files that have been compiled at least once; values are
    the resolved paths of their direct imports. An entry is replaced
    wholesale each time its file is compiled, so edges from an older
    version of the file disappear.

    When a file is forgotten only its own entry goes away. Edges that
    point at it from other files stay, so a recreated file still
    triggers its importers; a dangling edge simply never matches.
    """

    def __init__(self, default_extension: str = DEFAULT_EXTENSION) -> None:
        """
        Initialize an empty graph.

        Args:
            default_extension: Extension inferred for references without one
        """
        self._default_extension = default_extension
        # importer path -> resolved import paths
        self._imports: dict[str, frozenset[str]] = {}

    def _key(self, path: str | Path) -> str:
        return os.path.normpath(os.fspath(path))

    def record_imports(self, source_path: str | Path, raw_refs: Iterable[str]) -> frozenset[str]:
        """
        Replace the import set of a source file.

        Args:
            source_path: Absolute path of the compiled file
            raw_refs: Import references as written in the file

        Returns:
            The resolved import set now stored for the file
        """
        key = self._key(source_path)
        importer_dir = os.path.dirname(key)
        resolved = frozenset(
            resolve_import(importer_dir, ref, self._default_extension) for ref in raw_refs
        )

        previous = self._imports.get(key)
        self._imports[key] = resolved

        if previous is not None and previous != resolved:
            self.log.debug(
                "imports_changed",
                path=key,
                added=sorted(resolved - previous),
                removed=sorted(previous - resolved),
            )
        return resolved

    def dependents_of(self, changed_path: str | Path) -> set[str]:
        """
        Get every tracked file that directly imports a path.

        The path is normalized and given the default extension when it
        has none before comparing.
        """
        target = normalize_source_path(changed_path, self._default_extension)
        return {importer for importer, imports in self._imports.items() if target in imports}

    def transitive_dependents_of(self, changed_path: str | Path) -> set[str]:
        """Get every tracked file that imports a path directly or through other files."""
        found: set[str] = set()
        pending = [changed_path]
        while pending:
            for importer in self.dependents_of(pending.pop()):
                if importer not in found:
                    found.add(importer)
                    pending.append(importer)
        return found

    def imports_of(self, source_path: str | Path) -> frozenset[str]:
        """Get the recorded import set of a file (empty if untracked)."""
        return self._imports.get(self._key(source_path), frozenset())

    def forget(self, path: str | Path) -> bool:
        """
        Remove a file's own entry.

        Returns:
            True if the file was tracked
        """
        removed = self._imports.pop(self._key(path), None)
        if removed is not None:
            self.log.debug("forgot_file", path=self._key(path), imports=len(removed))
        return removed is not None

    def clear(self) -> None:
        """Drop all entries."""
        self._imports.clear()

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return self._key(path) in self._imports

    def __len__(self) -> int:
        return len(self._imports)

    def stats(self) -> dict[str, Any]:
        """Get statistics about the graph."""
        return {
            "tracked_files": len(self._imports),
            "total_edges": sum(len(imports) for imports in self._imports.values()),
        }
