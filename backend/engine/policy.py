"""
LessWatch Recompilation Policy.

Decides which files to compile for a change event.
Requires Python 3.11+.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from engine.output import output_path_for
from graph.import_graph import ImportGraph
from utils.config import WatchConfig
from utils.logger import LoggerMixin
from watcher.filters import PathFilter
from watcher.models import ChangeEvent


class CompileReason(str, Enum):
    """Why a file was selected for compilation."""

    DIRECT = "direct"
    IMPORTED = "imported"
    MAIN = "main"


@dataclass(frozen=True, slots=True)
class CompileTarget:
    """A compilation unit chosen for one event."""

    source: Path
    output: Path
    reason: CompileReason
    trigger: Path


class RecompilationPolicy(LoggerMixin):
    """
    Maps change events to compile targets.

    With a main file configured every qualifying change compiles the main
    file and nothing else. Otherwise the compilable importers of the
    changed file are compiled, and the file itself only when nothing
    imports it.
    """

    def __init__(self, config: WatchConfig, graph: ImportGraph, path_filter: PathFilter) -> None:
        self._config = config
        self._graph = graph
        self._filter = path_filter
        self._main_path = config.main_file_path

    @property
    def main_mode(self) -> bool:
        return self._main_path is not None

    def main_target(self, trigger: Path | None = None) -> CompileTarget:
        """The single compile target of main-file mode."""
        if self._main_path is None:
            raise ValueError("no main file configured")
        reason = CompileReason.DIRECT if trigger is None or trigger == self._main_path else CompileReason.MAIN
        return CompileTarget(
            source=self._main_path,
            output=output_path_for(self._main_path, self._config),
            reason=reason,
            trigger=trigger or self._main_path,
        )

    def direct_target(self, source: Path) -> CompileTarget:
        return CompileTarget(
            source=source,
            output=output_path_for(source, self._config),
            reason=CompileReason.DIRECT,
            trigger=source,
        )

    def compilable_importers_of(self, changed: Path) -> set[str]:
        """
        Get the compilable files that import a path.

        Importers that cannot be compiled on their own (partials) are
        looked through, so a change deep in a chain of partials reaches
        the first compilable file above it.
        """
        found: set[str] = set()
        seen: set[str] = set()
        pending = [changed]
        while pending:
            for importer in self._graph.dependents_of(pending.pop()):
                if importer in seen:
                    continue
                seen.add(importer)
                if self._filter.is_compilable(Path(importer)):
                    found.add(importer)
                else:
                    pending.append(Path(importer))
        return found

    def targets_for(self, event: ChangeEvent) -> list[CompileTarget]:
        """
        Select the files to compile for one event.

        Args:
            event: A classified change event

        Returns:
            Compile targets in the order they should run (may be empty)
        """
        if event.is_removal:
            return []

        changed = Path(os.path.normpath(event.path))

        if self._main_path is not None:
            return [self.main_target(changed)]

        importers = sorted(self.compilable_importers_of(changed))
        if importers:
            return [
                CompileTarget(
                    source=Path(importer),
                    output=output_path_for(Path(importer), self._config),
                    reason=CompileReason.IMPORTED,
                    trigger=changed,
                )
                for importer in importers
            ]

        if not self._filter.is_compilable(changed):
            self.log.debug("skipped_uncompilable", path=str(changed))
            return []

        return [self.direct_target(changed)]
