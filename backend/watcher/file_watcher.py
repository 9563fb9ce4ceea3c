"""
LessWatch File Watcher.

Cross-platform file system monitoring using watchdog.
Requires Python 3.11+.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from utils.config import get_settings
from utils.logger import LoggerMixin
from watcher.debouncer import Debouncer
from watcher.filters import PathFilter
from watcher.models import ChangeEvent, ChangeType, classify_path


class StylesheetHandler(FileSystemEventHandler, LoggerMixin):
    """
    Handles file system events for stylesheet sources.

    Drops directory events and paths the filter does not watch.
    """

    def __init__(self, debouncer: Debouncer, path_filter: PathFilter) -> None:
        """
        Initialize the file handler.

        Args:
            debouncer: Debouncer to accumulate changes
            path_filter: Rules for watched paths
        """
        super().__init__()
        self._debouncer = debouncer
        self._filter = path_filter

    def _submit(self, raw_path: str | bytes, change_type: ChangeType) -> None:
        path = Path(raw_path.decode() if isinstance(raw_path, bytes) else raw_path)
        if not self._filter.is_watched(path):
            return
        self.log.debug("file_event", path=str(path), change=change_type.value)
        self._debouncer.debounce(path, change_type)

    def on_created(self, event: FileCreatedEvent | DirCreatedEvent) -> None:
        """Handle file creation."""
        if not event.is_directory:
            self._submit(event.src_path, ChangeType.CREATED)

    def on_modified(self, event: FileModifiedEvent | DirModifiedEvent) -> None:
        """Handle file modification."""
        if not event.is_directory:
            self._submit(event.src_path, ChangeType.MODIFIED)

    def on_deleted(self, event: FileDeletedEvent | DirDeletedEvent) -> None:
        """Handle file deletion."""
        if not event.is_directory:
            self._submit(event.src_path, ChangeType.REMOVED)

    def on_moved(self, event: FileMovedEvent | DirMovedEvent) -> None:
        """Handle a rename as removal of the source and creation of the destination."""
        if event.is_directory:
            return
        self._submit(event.src_path, ChangeType.REMOVED)
        self._submit(event.dest_path, ChangeType.CREATED)


class FileWatcher(LoggerMixin):
    """
    Watches a directory tree for stylesheet changes.

    One observer is scheduled for the whole root. Debounced batches are
    re-classified against the filesystem and handed to ``on_change`` as
    ChangeEvent lists.
    """

    def __init__(
        self,
        root_path: Path,
        path_filter: PathFilter,
        on_change: Callable[[list[ChangeEvent]], Any],
        debounce_delay_ms: int | None = None,
        use_polling: bool | None = None,
    ) -> None:
        """
        Initialize the file watcher.

        Args:
            root_path: Root directory to watch
            path_filter: Rules for watched paths
            on_change: Callback for batched change events
            debounce_delay_ms: Debounce delay in milliseconds
            use_polling: Use the polling observer instead of native events
        """
        settings = get_settings()

        self._root_path = root_path
        self._on_change = on_change
        self._debounce_delay = debounce_delay_ms or settings.watcher.debounce_delay_ms
        self._use_polling = settings.watcher.use_polling if use_polling is None else use_polling

        self._debouncer = Debouncer(
            delay_ms=self._debounce_delay,
            callback=self._emit,
        )
        self._handler = StylesheetHandler(
            debouncer=self._debouncer,
            path_filter=path_filter,
        )

        self._observer: Any = None
        self._running = False

    def _emit(self, changes: list[tuple[Path, ChangeType]]) -> None:
        events = [classify_path(path, change_type) for path, change_type in changes]
        self._on_change(events)

    def start(self) -> None:
        """Start watching for file changes."""
        if self._running:
            return

        self._observer = PollingObserver() if self._use_polling else Observer()
        self._observer.schedule(self._handler, str(self._root_path), recursive=True)
        self._observer.start()
        self._running = True

        self.log.info(
            "file_watcher_started",
            path=str(self._root_path),
            polling=self._use_polling,
            debounce_ms=self._debounce_delay,
        )

    def stop(self) -> None:
        """Stop watching for file changes."""
        if not self._running:
            return

        self._debouncer.clear()

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None

        self._running = False
        self.log.info("file_watcher_stopped")

    def flush(self) -> list[tuple[Path, ChangeType]]:
        """Immediately process any pending changes."""
        return self._debouncer.flush()

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    @property
    def pending_count(self) -> int:
        """Get number of pending changes."""
        return self._debouncer.pending_count

    def __enter__(self) -> "FileWatcher":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.stop()
