"""
Logging configuration for the Bookshelf service.
Structured logging through structlog, rendered by the standard library handlers.
"""

import logging
import sys
from typing import List
import structlog
from structlog.types import Processor

_HANDLER_NAME = "bookshelf-console"

# Libraries that log every request at INFO
_QUIET_LOGGERS = ("urllib3", "requests", "waitress", "werkzeug")


def _shared_processors() -> List[Processor]:
    """Processors applied to both structlog and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
    ]


def _console_handler(processors: List[Processor]) -> logging.Handler:
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Calling it again replaces the console handler instead of adding a second one.

    Args:
        level: Log level name, e.g. "DEBUG"
    """
    processors = _shared_processors()

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)

    root_logger.addHandler(_console_handler(processors))
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)
