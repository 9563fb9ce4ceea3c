"""
LessWatch Logging.

structlog setup shared by the CLI and the watch loop.
Requires Python 3.11+.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from utils.config import Settings, get_settings


def _app_context(settings: Settings) -> Processor:
    """Build a processor stamping JSON records with the app name and version."""
    app, version = settings.app_name, settings.app_version

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app)
        event_dict.setdefault("version", version)
        return event_dict

    return processor


def _renderer(settings: Settings) -> list[Processor]:
    if settings.logging.format == "json":
        return [
            _app_context(settings),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    # Compile errors are read in a terminal, keep colors off when piped
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(level: str | None = None) -> None:
    """
    Configure structlog for a watch run.

    Args:
        level: Level name overriding LOG_LEVEL (e.g. from --log-level)
    """
    settings = get_settings()
    level_no = getattr(logging, (level or settings.logging.level).upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            *_renderer(settings),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_no)
    # watchdog logs every observer event at DEBUG
    logging.getLogger("watchdog").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, named after the calling component."""
    return structlog.get_logger(name)


class LoggerMixin:
    """
    Gives a class a `log` property bound to its class name.

    Usage:
        class ImportGraph(LoggerMixin):
            def forget(self, path):
                self.log.debug("forgot_file", path=path)
    """

    @property
    def log(self) -> structlog.stdlib.BoundLogger:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
