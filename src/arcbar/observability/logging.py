"""
Structured logging configuration for arcbar.

Provides JSON and human-readable formatters, a context-carrying logger
wrapper with chart lifecycle events, and a one-call setup for the
``arcbar`` logger namespace.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any

_RESERVED_ATTRS = frozenset((
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "exc_info",
    "exc_text",
    "thread",
    "threadName",
    "taskName",
    "message",
))


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per log record.

    Extra fields passed through ``extra=`` (chart id, event type, ...) are
    emitted as top-level keys.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = datetime.utcnow().isoformat() + "Z"

        log_data["level"] = record.levelname.lower()
        log_data["logger"] = record.name
        log_data["message"] = record.getMessage()

        if self.include_location:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        log_data.update(self.extra_fields)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Formatter for terminals: timestamp, level, logger name, message."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, include_timestamp: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable text."""
        parts = []

        if self.include_timestamp:
            parts.append(f"[{datetime.utcnow().strftime('%Y-%m-%d %H:%M:%S')}]")

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level = f"{self.COLORS[level]}{level}{self.RESET}"
        parts.append(f"{level:>8}")

        parts.append(f"{record.name}:")
        parts.append(record.getMessage())

        output = " ".join(parts)

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


class ArcbarLogger:
    """
    Wrapper around a standard logger that carries chart context.

    Every record is logged with the persistent context (chart id, chart
    type) merged into ``extra``.
    """

    def __init__(self, name: str, level: int | None = None):
        self.logger = logging.getLogger(name)
        if level is not None:
            self.logger.setLevel(level)
        self._context: dict[str, Any] = {}

    def set_context(self, **kwargs: Any) -> None:
        """Set persistent context fields for all logs."""
        self._context.update(kwargs)

    def clear_context(self) -> None:
        self._context.clear()

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        extra = {**self._context, **kwargs}
        self.logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def render_started(self, render_count: int, trigger: str) -> None:
        """Log render start event."""
        self.debug(
            "Render started",
            event_type="render.started",
            render_count=render_count,
            trigger=trigger,
        )

    def render_completed(self, render_count: int, joins: dict[str, dict[str, int]]) -> None:
        """Log render completion with per-layer enter/update/exit counts."""
        self.debug(
            "Render completed",
            event_type="render.completed",
            render_count=render_count,
            joins=joins,
        )

    def render_skipped(self, reason: str) -> None:
        """Log a render that produced nothing."""
        self.debug(
            "Render skipped",
            event_type="render.skipped",
            reason=reason,
        )

    def resize_coalesced(self, width: float | None) -> None:
        self.debug(
            "Resize notification coalesced",
            event_type="resize.coalesced",
            container_width=width,
        )

    def chart_disposed(self, render_count: int) -> None:
        self.info(
            "Chart disposed",
            event_type="chart.disposed",
            render_count=render_count,
        )


def configure_logging(
    level: str = "WARNING",
    format: str = "human",
    output: str = "stderr",
    extra_fields: dict[str, Any] | None = None,
) -> None:
    """
    Configure logging for the ``arcbar`` namespace.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (human, json)
        output: Output destination (stderr, stdout)
        extra_fields: Extra fields to include in structured logs
    """
    root_logger = logging.getLogger("arcbar")
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    root_logger.handlers.clear()

    if output == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        handler = logging.StreamHandler(sys.stderr)

    if format == "json":
        formatter: logging.Formatter = StructuredFormatter(extra_fields=extra_fields)
    else:
        formatter = HumanReadableFormatter()

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> ArcbarLogger:
    """
    Get an arcbar logger instance.

    Args:
        name: Logger name relative to the ``arcbar`` namespace

    Returns:
        ArcbarLogger instance
    """
    if name.startswith("arcbar"):
        return ArcbarLogger(name)
    return ArcbarLogger(f"arcbar.{name}")
