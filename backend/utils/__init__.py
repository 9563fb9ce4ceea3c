"""
LessWatch Utilities Package.

Configuration, logging and error types shared across all packages.
Requires Python 3.11+.
"""

from utils.config import (
    CompileOptions,
    Settings,
    WatchConfig,
    build_watch_config,
    deep_merge,
    get_settings,
    load_config_file,
)
from utils.exceptions import LessWatchError, MainFileMissingError, MissingArgumentsError, StartupConfigError
from utils.logger import configure_logging, get_logger, LoggerMixin

__all__ = [
    "CompileOptions",
    "Settings",
    "WatchConfig",
    "build_watch_config",
    "deep_merge",
    "get_settings",
    "load_config_file",
    "LessWatchError",
    "MainFileMissingError",
    "MissingArgumentsError",
    "StartupConfigError",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
]
