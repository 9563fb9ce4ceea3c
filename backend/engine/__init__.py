"""
LessWatch Engine Package.

Recompilation policy, output writing and the watch loop.
Requires Python 3.11+.
"""

from engine.output import OUTPUT_EXTENSION, OutputWriter, output_path_for
from engine.policy import CompileReason, CompileTarget, RecompilationPolicy
from engine.watch_loop import CompileOutcome, WatchLoop, WatchState

__all__ = [
    "OUTPUT_EXTENSION",
    "OutputWriter",
    "output_path_for",
    "CompileReason",
    "CompileTarget",
    "RecompilationPolicy",
    "CompileOutcome",
    "WatchLoop",
    "WatchState",
]
