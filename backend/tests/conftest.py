"""
LessWatch Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from compiler.import_scanner import scan_imports
from compiler.models import CompileFailure, CompileResult, CompileSuccess
from utils.config import CompileOptions, WatchConfig


class FakeCompiler:
    """In-memory stand-in for lessc that records every call."""

    def __init__(self) -> None:
        self.calls: list[Path] = []
        self.fail_on: set[Path] = set()

    def compile(
        self,
        source_path: Path,
        options: CompileOptions,
        output_path: Path | None = None,
    ) -> CompileResult:
        self.calls.append(source_path)
        if source_path in self.fail_on:
            return CompileFailure(
                message="Unrecognised input",
                offending_file=str(source_path),
                line=1,
            )
        text = source_path.read_text(encoding="utf-8")
        return CompileSuccess(
            css=f"/* {source_path.name} */\n{text}",
            source_map='{"version":3}' if options.source_map else None,
            imports=scan_imports(text),
        )


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    """Create a recording fake compiler."""
    return FakeCompiler()


@pytest.fixture
def src_dir(tmp_path: Path) -> Path:
    """Watch folder with a small Less tree."""
    src = tmp_path / "src"
    (src / "components").mkdir(parents=True)

    (src / "A.less").write_text('@import "B";\n.a { color: @brand; }\n')
    (src / "B.less").write_text("@brand: red;\n.b { color: @brand; }\n")
    (src / "C.less").write_text(".c { margin: 0; }\n")
    (src / "_vars.less").write_text("@size: 10px;\n")
    (src / "main.less").write_text('@import "_vars";\n@import "components/button";\n')
    (src / "components" / "button.less").write_text(".button { padding: 1px; }\n")
    (src / ".hidden.less").write_text(".hidden {}\n")
    (src / "notes.txt").write_text("not a stylesheet\n")
    return src


@pytest.fixture
def dist_dir(tmp_path: Path) -> Path:
    """Output folder path (not created)."""
    return tmp_path / "dist"


@pytest.fixture
def make_config(src_dir: Path, dist_dir: Path) -> Callable[..., WatchConfig]:
    """Factory for run configurations over the sample tree."""

    def _make(**overrides) -> WatchConfig:
        values = {"watch_folder": src_dir, "output_folder": dist_dir}
        values.update(overrides)
        return WatchConfig(**values)

    return _make
