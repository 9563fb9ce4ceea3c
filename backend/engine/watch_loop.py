"""
LessWatch Watch Loop.

Initial compile of the tree, then sequential handling of change events.
Requires Python 3.11+.
"""

import queue
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from compiler.import_scanner import scan_imports
from compiler.models import CompileFailure, CompileResult, Compiler
from engine.output import OutputWriter
from engine.policy import CompileReason, CompileTarget, RecompilationPolicy
from graph.import_graph import ImportGraph
from utils.config import WatchConfig
from utils.exceptions import MainFileMissingError
from utils.logger import LoggerMixin
from watcher.file_watcher import FileWatcher
from watcher.filters import PathFilter
from watcher.models import ChangeEvent

WatcherFactory = Callable[[Path, PathFilter, Callable[[list[ChangeEvent]], Any]], Any]


class WatchState(str, Enum):
    """Lifecycle states of the watch loop."""

    IDLE = "idle"
    INITIAL_SCAN = "initial_scan"
    WATCHING = "watching"
    HANDLING_EVENT = "handling_event"
    STOPPED = "stopped"
    EXITED = "exited"


@dataclass(slots=True)
class CompileOutcome:
    """Result of one compile attempt."""

    target: CompileTarget
    result: CompileResult
    written: list[Path]
    finished_at: datetime

    @property
    def ok(self) -> bool:
        return self.result.ok and bool(self.written)


def _default_watcher_factory(
    root: Path, path_filter: PathFilter, on_change: Callable[[list[ChangeEvent]], Any]
) -> FileWatcher:
    return FileWatcher(root_path=root, path_filter=path_filter, on_change=on_change)


class WatchLoop(LoggerMixin):
    """
    Orchestrates compiles for one watch run.

    The loop thread is the only one that touches the import graph, the
    compiler and the output tree. Watcher threads only put event batches
    on a queue, so compiles never overlap.
    """

    def __init__(
        self,
        config: WatchConfig,
        compiler: Compiler,
        graph: ImportGraph | None = None,
        writer: OutputWriter | None = None,
        watcher_factory: WatcherFactory | None = None,
        poll_timeout: float = 0.5,
    ) -> None:
        """
        Initialize the loop.

        Args:
            config: Immutable run configuration
            compiler: Compile adapter
            graph: Import graph, a new one by default
            writer: Output writer, a new one by default
            watcher_factory: Builds the file watcher for the watch root
            poll_timeout: Seconds to block on the event queue between stop checks
        """
        self._config = config
        self._compiler = compiler
        self._graph = graph if graph is not None else ImportGraph(default_extension=config.default_extension)
        self._writer = writer if writer is not None else OutputWriter()
        self._filter = PathFilter(config)
        self._policy = RecompilationPolicy(config, self._graph, self._filter)
        self._watcher_factory = watcher_factory or _default_watcher_factory
        self._poll_timeout = poll_timeout

        self._events: queue.Queue[list[ChangeEvent]] = queue.Queue()
        self._stop_requested = False
        self.state = WatchState.IDLE

    @property
    def graph(self) -> ImportGraph:
        return self._graph

    @property
    def policy(self) -> RecompilationPolicy:
        return self._policy

    def check_main_file(self) -> None:
        """
        Verify the main file exists when one is configured.

        Raises:
            MainFileMissingError: If the main file is not on disk
        """
        main_path = self._config.main_file_path
        if main_path is not None and not main_path.is_file():
            raise MainFileMissingError(main_path)

    def compile_target(self, target: CompileTarget) -> CompileOutcome:
        """Compile one target, write its output and refresh its imports."""
        result = self._compiler.compile(target.source, self._config.compile_options, target.output)
        written: list[Path] = []

        if isinstance(result, CompileFailure):
            self.log.error(
                "compile_failed",
                path=str(target.source),
                **result.as_dict,
            )
        else:
            try:
                written = self._writer.write(target.output, result)
            except OSError as e:
                self.log.error("write_failed", path=str(target.output), error=str(e))
            else:
                resolved = self._graph.record_imports(target.source, result.imports)
                self._record_partials(resolved)

        outcome = CompileOutcome(
            target=target,
            result=result,
            written=written,
            finished_at=datetime.now(),
        )
        if outcome.ok:
            self._report(outcome)
        return outcome

    def _record_partials(self, imports: Iterable[str]) -> None:
        """
        Scan the watched partials reachable from an import set.

        Partials are never compiled, so their own imports are read from
        disk to keep chains of partials in the graph.
        """
        pending = list(imports)
        visited: set[str] = set()
        while pending:
            path = Path(pending.pop())
            if str(path) in visited:
                continue
            visited.add(str(path))
            if not self._filter.is_watched(path) or self._filter.is_compilable(path):
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self.log.debug("partial_scan_skipped", path=str(path), error=str(e))
                continue
            pending.extend(self._graph.record_imports(path, scan_imports(text)))

    def _report(self, outcome: CompileOutcome) -> None:
        target = outcome.target
        if target.reason is CompileReason.IMPORTED:
            self.log.info(
                "recompiled_importer",
                path=str(target.source),
                imported=str(target.trigger),
                output=str(target.output),
            )
        elif target.reason is CompileReason.MAIN:
            self.log.info(
                "recompiled_main",
                path=str(target.source),
                changed=str(target.trigger),
                imported_by_main=str(target.source) in self._graph.transitive_dependents_of(target.trigger),
                output=str(target.output),
            )
        else:
            self.log.info("compiled", path=str(target.source), output=str(target.output))

    def initial_scan(self) -> list[CompileOutcome]:
        """
        Compile the whole tree once.

        Only the main file is compiled in main-file mode, otherwise every
        compilable file under the watch root.
        """
        self.state = WatchState.INITIAL_SCAN
        start_time = time.perf_counter()

        if self._policy.main_mode:
            targets = [self._policy.main_target()]
        else:
            targets = [self._policy.direct_target(source) for source in self._filter.iter_sources()]

        outcomes = [self.compile_target(target) for target in targets]

        self.log.info(
            "initial_scan_completed",
            compiled=sum(1 for o in outcomes if o.ok),
            failed=sum(1 for o in outcomes if not o.ok),
            elapsed_seconds=round(time.perf_counter() - start_time, 2),
        )
        return outcomes

    def handle_event(self, event: ChangeEvent) -> list[CompileOutcome]:
        """
        Apply the recompilation policy to one event.

        Errors other than compile failures are logged; the loop goes on.
        """
        previous = self.state
        self.state = WatchState.HANDLING_EVENT
        try:
            if event.is_removal:
                self.log.info("file_removed", path=str(event.path))
                self._graph.forget(event.path)
                return []

            outcomes: list[CompileOutcome] = []
            for target in self._policy.targets_for(event):
                outcomes.append(self.compile_target(target))
            return outcomes
        except Exception as e:
            self.log.exception("event_handling_failed", path=str(event.path), error=str(e))
            return []
        finally:
            if self.state is WatchState.HANDLING_EVENT:
                self.state = previous

    def handle_batch(self, events: Iterable[ChangeEvent]) -> list[CompileOutcome]:
        """Handle events one at a time, in arrival order."""
        outcomes: list[CompileOutcome] = []
        for event in events:
            outcomes.extend(self.handle_event(event))
        return outcomes

    def submit(self, events: list[ChangeEvent]) -> None:
        """Queue a batch of events; safe to call from watcher threads."""
        if events:
            self._events.put(events)

    def stop(self) -> None:
        """Ask the loop to stop after the event in progress."""
        self._stop_requested = True

    def run(self) -> int:
        """
        Run the loop until stopped.

        Returns:
            Process exit code

        Raises:
            MainFileMissingError: If the configured main file does not exist
        """
        self.check_main_file()
        self.initial_scan()

        if self._config.run_once:
            self.log.info("run_once_completed")
            self.state = WatchState.EXITED
            return 0

        watcher = self._watcher_factory(self._config.watch_folder, self._filter, self.submit)
        watcher.start()
        self.state = WatchState.WATCHING
        self.log.info("watching_for_changes", path=str(self._config.watch_folder))

        try:
            while not self._stop_requested:
                try:
                    batch = self._events.get(timeout=self._poll_timeout)
                except queue.Empty:
                    continue
                self.handle_batch(batch)
        finally:
            watcher.stop()
            self.state = WatchState.STOPPED

        return 0
