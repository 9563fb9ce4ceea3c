"""
LessWatch Output Writer.

Maps sources to output paths and writes generated CSS.
Requires Python 3.11+.
"""

import os
import stat
import tempfile
from pathlib import Path

from compiler.models import CompileSuccess
from utils.config import WatchConfig

OUTPUT_EXTENSION = ".css"
SOURCE_MAP_SUFFIX = ".map"


def output_path_for(source_path: Path, config: WatchConfig) -> Path:
    """
    Get the output file for a source.

    The output tree mirrors the watch tree with the extension swapped.
    A source outside the watch tree lands at the top of the output tree.
    """
    source = Path(os.path.normpath(source_path))
    try:
        relative = source.relative_to(config.watch_folder)
    except ValueError:
        relative = Path(source.name)
    return (config.output_folder / relative).with_suffix(OUTPUT_EXTENSION)


def _atomic_write(path: Path, text: str, mode: int = 0o644) -> None:
    if path.exists():
        mode = stat.S_IMODE(path.stat().st_mode)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class OutputWriter:
    """
    Writes compile results into the output tree.

    Parent directories are created on demand and each file is replaced
    atomically, so readers never see partial CSS. Nothing is ever
    deleted from the output tree.
    """

    def write(self, output_path: Path, result: CompileSuccess) -> list[Path]:
        """
        Write CSS and, when present, its source map.

        Returns:
            Paths written
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        _atomic_write(output_path, result.css)
        written = [output_path]

        if result.source_map is not None:
            map_path = output_path.with_name(output_path.name + SOURCE_MAP_SUFFIX)
            _atomic_write(map_path, result.source_map)
            written.append(map_path)

        return written
