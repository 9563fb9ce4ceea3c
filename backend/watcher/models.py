"""
LessWatch Change Events.

Tagged filesystem change events, classified once at the watch boundary.
Requires Python 3.11+.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ChangeType(str, Enum):
    """Kinds of filesystem changes."""

    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A change to one source file."""

    path: Path
    change_type: ChangeType
    link_count: int | None = None

    @property
    def is_removal(self) -> bool:
        return self.change_type is ChangeType.REMOVED


def classify_path(path: Path, reported: ChangeType) -> ChangeEvent:
    """
    Build a ChangeEvent from a reported change and the file's current state.

    A path with no links (or that can no longer be stat'ed) is a removal
    whatever was reported; a reported removal of a file that exists again is a rewrite
    and becomes a modification.
    """
    try:
        link_count = os.stat(path).st_nlink
    except OSError:
        link_count = 0

    if link_count == 0:
        change_type = ChangeType.REMOVED
    elif reported is ChangeType.REMOVED:
        change_type = ChangeType.MODIFIED
    else:
        change_type = reported

    return ChangeEvent(path=path, change_type=change_type, link_count=link_count)
