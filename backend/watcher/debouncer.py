"""
LessWatch Debouncer.

Debounces rapid file system events into batches.
Requires Python 3.11+.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from utils.logger import LoggerMixin
from watcher.models import ChangeType


@dataclass
class PendingChange:
    """A pending file change waiting to be processed."""

    path: Path
    change_type: ChangeType
    timestamp: float


def merge_change(previous: ChangeType, incoming: ChangeType) -> ChangeType:
    """
    Combine two changes to the same path seen within one debounce window.

    A removal always wins. A file created and then modified is still new.
    A file removed and recreated was rewritten in place.
    """
    if incoming is ChangeType.REMOVED:
        return ChangeType.REMOVED
    if previous is ChangeType.REMOVED:
        return ChangeType.MODIFIED
    if previous is ChangeType.CREATED:
        return ChangeType.CREATED
    return incoming


class Debouncer(LoggerMixin):
    """
    Debounces rapid file changes.

    Accumulates changes and triggers callback after a delay period
    with no new changes. Editors often write a file several times per
    save; each path is reported once per batch, in the order it was
    first seen.
    """

    def __init__(
        self,
        delay_ms: int = 200,
        callback: Callable[[list[tuple[Path, ChangeType]]], Any] | None = None,
    ) -> None:
        """
        Initialize the debouncer.

        Args:
            delay_ms: Delay in milliseconds before processing
            callback: Function to call with accumulated changes
        """
        self._delay = delay_ms / 1000.0
        self._callback = callback
        self._pending: dict[Path, PendingChange] = {}
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def set_callback(self, callback: Callable[[list[tuple[Path, ChangeType]]], Any]) -> None:
        """Set or update the callback function."""
        self._callback = callback

    def debounce(self, path: Path, change_type: ChangeType) -> None:
        """
        Add a file change to the pending queue.

        The callback will be triggered after delay_ms milliseconds
        of no new changes.
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

            existing = self._pending.get(path)
            if existing is not None:
                existing.change_type = merge_change(existing.change_type, change_type)
                existing.timestamp = time.time()
            else:
                self._pending[path] = PendingChange(
                    path=path,
                    change_type=change_type,
                    timestamp=time.time(),
                )

            self._timer = threading.Timer(self._delay, self._process_pending)
            self._timer.daemon = True
            self._timer.start()

    def _take_pending(self) -> list[tuple[Path, ChangeType]]:
        changes = [(change.path, change.change_type) for change in self._pending.values()]
        self._pending.clear()
        return changes

    def _dispatch(self, changes: list[tuple[Path, ChangeType]]) -> None:
        if not changes or self._callback is None:
            return
        try:
            self._callback(changes)
        except Exception as e:
            self.log.error("debounce_callback_failed", error=str(e))

    def _process_pending(self) -> None:
        """Process all pending changes."""
        with self._lock:
            changes = self._take_pending()
            self._timer = None

        if changes:
            self.log.debug("processing_debounced_changes", count=len(changes))
        self._dispatch(changes)

    def flush(self) -> list[tuple[Path, ChangeType]]:
        """
        Immediately process all pending changes.

        Returns:
            List of (path, change_type) tuples that were pending
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            changes = self._take_pending()

        self._dispatch(changes)
        return changes

    def clear(self) -> None:
        """Clear all pending changes without processing."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending.clear()

    @property
    def pending_count(self) -> int:
        """Get number of pending changes."""
        return len(self._pending)

    @property
    def pending_paths(self) -> list[Path]:
        """Get list of paths with pending changes."""
        return list(self._pending.keys())
