"""Structured logging setup."""

import logging
import sys

import structlog
from textual.logging import TextualHandler

LOGGER_NAME = "voice_cart"


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _level(verbose: bool) -> int:
    return logging.DEBUG if verbose else logging.WARNING


def configure_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Configure structlog to write event-style logs to stderr.

    Args:
        verbose: Log everything from DEBUG up instead of only warnings and errors
        json_logs: Render JSON lines instead of the console format
    """
    processors = _shared_processors()
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level(verbose)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def configure_tui_logging(verbose: bool = False) -> None:
    """Route structlog through textual's log while the TUI owns the terminal.

    Records go to the ``voice_cart`` stdlib logger, whose only handler is a
    ``TextualHandler``. Inside a running app that forwards to the textual
    devtools console instead of the screen.
    """
    level = _level(verbose)
    stdlib_logger = logging.getLogger(LOGGER_NAME)
    stdlib_logger.handlers[:] = [TextualHandler()]
    stdlib_logger.setLevel(level)
    stdlib_logger.propagate = False

    structlog.configure(
        processors=[*_shared_processors(), structlog.dev.ConsoleRenderer(colors=False)],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
