"""
LessWatch File Watcher Package.

File system monitoring for incremental recompilation.
Requires Python 3.11+.
"""

from watcher.models import ChangeEvent, ChangeType, classify_path
from watcher.filters import PathFilter
from watcher.debouncer import Debouncer
from watcher.file_watcher import FileWatcher

__all__ = [
    "ChangeEvent",
    "ChangeType",
    "classify_path",
    "PathFilter",
    "Debouncer",
    "FileWatcher",
]
