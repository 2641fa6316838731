"""Structured logging configuration for colivara-client.

The client logs through structlog. Applications embedding the client can call
``configure_logging`` once at startup; otherwise structlog's defaults apply.
Output is logfmt when stderr is not a TTY and colorized console output when
it is. Every API call binds a short ``call_id`` so the log lines of one call
can be correlated.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars
from structlog.processors import TimeStamper, add_log_level


if TYPE_CHECKING:
    from collections.abc import Iterator


__all__ = [
    "LogLevel",
    "call_context",
    "configure_logging",
    "generate_call_id",
    "get_logger",
]


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_stdlib_level(self) -> int:
        """Convert to the stdlib logging level constant."""
        level: int = getattr(logging, self.name)
        return level


def generate_call_id() -> str:
    """Generate a short unique id for one API call."""
    return uuid.uuid4().hex[:8]


@contextmanager
def call_context(operation: str) -> Iterator[str]:
    """Bind ``operation`` and a fresh ``call_id`` to every log line inside.

    Args:
        operation: Name of the client operation being performed.

    Yields:
        The generated call id.
    """
    call_id = generate_call_id()
    with bound_contextvars(operation=operation, call_id=call_id):
        yield call_id


def _create_renderer(
    *,
    colors: bool,
) -> structlog.dev.ConsoleRenderer | structlog.processors.LogfmtRenderer:
    """Pick the console renderer for TTYs and logfmt otherwise."""
    if colors:
        return structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.LogfmtRenderer(
        key_order=["timestamp", "level", "event", "operation", "call_id"],
        drop_missing=True,
        bool_as_flag=False,
    )


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    *,
    force_colors: bool | None = None,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level, as a LogLevel or its string value
            (case-insensitive).
        force_colors: Force color output on/off. If None, auto-detect from TTY.

    Example:
        >>> from colivara_client.observability import configure_logging
        >>> configure_logging(level="debug")
    """
    if isinstance(level, str):
        level = LogLevel(level.lower())

    if force_colors is not None:
        use_colors = force_colors
    else:
        use_colors = (
            sys.stderr is not None
            and hasattr(sys.stderr, "isatty")
            and sys.stderr.isatty()
        )

    processors: list[structlog.typing.Processor] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _create_renderer(colors=use_colors),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level.to_stdlib_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # httpx logs through stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level.to_stdlib_level(),
        force=True,
    )


def get_logger(
    name: str | None = None,
    **initial_context: object,
) -> structlog.BoundLogger:
    """Get a structured logger, optionally with bound initial context.

    Example:
        >>> logger = get_logger(__name__, component="cli")
        >>> logger.info("starting")
    """
    log: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        log = log.bind(**initial_context)
    return log
