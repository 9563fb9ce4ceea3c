"""
LessWatch Path Resolver.

Lexical resolution of import references. Never touches the filesystem.
Requires Python 3.11+.
"""

import os
from pathlib import Path

DEFAULT_EXTENSION = ".less"


def has_extension(reference: str) -> bool:
    """Check whether a reference carries an extension (more than a bare dot)."""
    return len(os.path.splitext(reference)[1]) > 1


def normalize_source_path(path: str | Path, default_extension: str = DEFAULT_EXTENSION) -> str:
    """
    Normalize a path for comparison against resolved imports.

    Collapses ``.``/``..`` segments and appends the default extension
    when the path has none, mirroring how import references are resolved.
    """
    text = os.fspath(path)
    if not has_extension(text):
        text += default_extension
    return os.path.normpath(text)


def resolve_import(
    importer_dir: str | Path,
    reference: str,
    default_extension: str = DEFAULT_EXTENSION,
) -> str:
    """
    Resolve an import reference to an absolute, normalized path.

    Args:
        importer_dir: Directory of the file containing the import
        reference: Raw reference as written in the import statement
        default_extension: Extension added when the reference has none

    Returns:
        Normalized path; absolute references are kept absolute
    """
    return normalize_source_path(os.path.join(os.fspath(importer_dir), reference), default_extension)
