"""Structured logging configuration using structlog."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

# Chatty third-party loggers that would otherwise drown the event stream
NOISY_LOGGERS = ("httpx", "httpcore", "slack_bolt", "slack_sdk", "aiosqlite")


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Emit JSON lines instead of the colored console format.
    """
    level = getattr(logging, log_level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)


@contextmanager
def slack_event_context(**context: str | None) -> Iterator[None]:
    """Bind Slack event identifiers (user, channel, ts) to every log line.

    Values that are None are dropped so the output stays compact.
    """
    bound = {key: value for key, value in context.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield
