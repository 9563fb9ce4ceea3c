"""
LessWatch Compiler Package.

Compile adapter, import scanning and import path resolution.
Requires Python 3.11+.
"""

from compiler.models import CompileFailure, CompileResult, CompileSuccess, Compiler
from compiler.import_scanner import scan_imports, strip_comments
from compiler.path_resolver import DEFAULT_EXTENSION, has_extension, normalize_source_path, resolve_import
from compiler.less_compiler import LessCompiler, parse_error_output

__all__ = [
    # Results
    "CompileFailure",
    "CompileResult",
    "CompileSuccess",
    "Compiler",
    # Import discovery
    "scan_imports",
    "strip_comments",
    "DEFAULT_EXTENSION",
    "has_extension",
    "normalize_source_path",
    "resolve_import",
    # Adapter
    "LessCompiler",
    "parse_error_output",
]
