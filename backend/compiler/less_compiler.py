"""
LessWatch lessc Adapter.

Runs the external lessc compiler on one source file.
Requires Python 3.11+.
"""

import os
import re
import subprocess
import tempfile
import time
from pathlib import Path

from compiler.import_scanner import scan_imports
from compiler.models import CompileFailure, CompileResult, CompileSuccess
from utils.config import CompileOptions, get_settings
from utils.logger import LoggerMixin

_ANSI = re.compile(r"\x1b\[[0-9;]*m")
_ERROR_LOCATION = re.compile(
    r"^(?P<message>.*)\s+in\s+(?P<file>.+?)\s+on line\s+(?P<line>\d+)(?:,\s*column\s+\d+)?:?\s*$",
    re.MULTILINE,
)


def parse_error_output(output: str, source_path: Path) -> CompileFailure:
    """
    Turn lessc error output into a CompileFailure.

    Falls back to the compiled source and the first non-empty line
    when the output has no recognizable location.
    """
    text = _ANSI.sub("", output).strip()
    match = _ERROR_LOCATION.search(text)
    if match:
        return CompileFailure(
            message=match.group("message").strip(),
            offending_file=match.group("file").strip(),
            line=int(match.group("line")),
        )

    first_line = next((line.strip() for line in text.splitlines() if line.strip()), "")
    return CompileFailure(
        message=first_line or "lessc failed without output",
        offending_file=str(source_path),
    )


class LessCompiler(LoggerMixin):
    """
    Compile adapter around the lessc command line compiler.

    lessc writes into a private temporary directory; the generated CSS
    and source map are read back and returned, so callers decide where
    output ends up and failures never touch existing output.
    """

    def __init__(self, executable: str | None = None, timeout_seconds: float | None = None) -> None:
        """
        Initialize the adapter.

        Args:
            executable: lessc executable, defaults to LESSC_EXECUTABLE
            timeout_seconds: Per-compile timeout, defaults to LESSC_TIMEOUT_SECONDS
        """
        settings = get_settings()
        self._executable = executable or settings.compiler.executable
        self._timeout = timeout_seconds or settings.compiler.timeout_seconds

    def build_command(
        self,
        source_path: Path,
        target_path: Path,
        options: CompileOptions,
        output_path: Path | None = None,
    ) -> list[str]:
        """Build the lessc command line for one compile."""
        command = [self._executable, "--no-color"]

        if options.enable_js:
            command.append("--js")

        if options.source_map:
            command.append("--source-map")
            command.append(f"--source-map-url={target_path.name}.map")
            if output_path is not None:
                rootpath = os.path.relpath(source_path.parent, output_path.parent)
                command.append(f"--source-map-basepath={source_path.parent}")
                command.append(f"--source-map-rootpath={Path(rootpath).as_posix()}/")

        for plugin in options.plugins:
            command.append(f"--plugin={plugin}")

        for key, value in options.less_args.items():
            command.append(f"--{key}={value}" if value else f"--{key}")

        command.extend([str(source_path), str(target_path)])
        return command

    def compile(
        self,
        source_path: Path,
        options: CompileOptions,
        output_path: Path | None = None,
    ) -> CompileResult:
        """
        Compile one Less file.

        Args:
            source_path: Absolute path of the source
            options: Options bundle from the run configuration
            output_path: Final output location, used for source map paths

        Returns:
            CompileSuccess or CompileFailure
        """
        start_time = time.perf_counter()

        try:
            source_text = source_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return CompileFailure(message=f"Could not read source: {e}", offending_file=str(source_path))

        imports = scan_imports(source_text)

        with tempfile.TemporaryDirectory(prefix="lesswatch-") as tmp_dir:
            target_name = output_path.name if output_path else source_path.with_suffix(".css").name
            target_path = Path(tmp_dir) / target_name
            command = self.build_command(source_path, target_path, options, output_path)

            try:
                proc = subprocess.run(
                    command,
                    capture_output=True,
                    text=True,
                    cwd=source_path.parent,
                    timeout=self._timeout,
                    check=False,
                )
            except FileNotFoundError:
                return CompileFailure(
                    message=f"'{self._executable}' command not found. Is less installed (npm install -g less)?",
                    offending_file=str(source_path),
                )
            except subprocess.TimeoutExpired:
                return CompileFailure(
                    message=f"lessc timed out after {self._timeout}s",
                    offending_file=str(source_path),
                )

            if proc.returncode != 0:
                return parse_error_output(proc.stderr or proc.stdout, source_path)

            if proc.stderr.strip():
                self.log.warning("lessc_warning", path=str(source_path), output=proc.stderr.strip())

            try:
                css = target_path.read_text(encoding="utf-8")
                map_path = target_path.with_name(target_path.name + ".map")
                source_map = map_path.read_text(encoding="utf-8") if map_path.exists() else None
            except OSError as e:
                return CompileFailure(message=f"lessc produced no output: {e}", offending_file=str(source_path))

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.log.debug(
            "compiled_file",
            path=str(source_path),
            elapsed_ms=round(elapsed_ms, 2),
            imports=len(imports),
        )
        return CompileSuccess(css=css, source_map=source_map, imports=imports)
