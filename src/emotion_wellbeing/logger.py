"""Structured logging configuration using *structlog*."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog


def setup_logging(level: str = "INFO", *, json_logs: bool | None = None, stream: TextIO | None = None) -> None:
    """Configure *structlog* for the CLI and the local shell.

    Logs go to *stream* (stderr by default) so that command output on stdout
    stays clean.  ``json_logs=None`` picks the console renderer for a terminal
    and JSON lines otherwise.
    """
    stream = stream or sys.stderr
    if json_logs is None:
        json_logs = not stream.isatty()
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    return number if isinstance(number, int) else logging.INFO
