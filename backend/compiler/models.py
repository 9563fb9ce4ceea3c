"""
LessWatch Compiler Data Models.

Result types returned by the compile adapter.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from utils.config import CompileOptions


@dataclass(slots=True)
class CompileSuccess:
    """Generated CSS plus the raw import references seen while compiling."""

    css: str
    source_map: str | None = None
    imports: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


@dataclass(slots=True)
class CompileFailure:
    """A compile error reported by the external compiler."""

    message: str
    offending_file: str | None = None
    line: int | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "message": self.message,
            "offending_file": self.offending_file,
            "line": self.line,
        }


CompileResult = CompileSuccess | CompileFailure


class Compiler(Protocol):
    """Anything that can turn one source file into CSS."""

    def compile(
        self,
        source_path: Path,
        options: CompileOptions,
        output_path: Path | None = None,
    ) -> CompileResult:
        ...
