"""Structured logging for retry execution.

Key/value events with bound context, rendered as human-readable console
lines, JSON lines (orjson) or forwarded to the stdlib ``logging`` tree.

Quick Start:
    >>> from replaykit.runtime.observability import get_logger, configure_logging
    >>>
    >>> configure_logging(format="console", level="DEBUG")
    >>> log = get_logger("replaykit.retry").bind(method="GET")
    >>> log.info("retrying", attempt=1, delay=0.05)
    # => 10:30:45.123 [info] retrying attempt=1 delay=0.05 logger="replaykit.retry" method="GET"

By default events go to the stdlib logger named after the bound ``logger``
key, so applications that already configure ``logging`` need nothing else.
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

import orjson

if TYPE_CHECKING:
    from replaykit.foundation.config import LoggingSettings

LogValue = str | int | float | bool | None
LogContext = dict[str, LogValue]


@dataclass(slots=True)
class LogEntry:
    """Single log event with its merged context."""

    timestamp: float
    level: str
    event: str
    context: LogContext


@runtime_checkable
class LogRenderer(Protocol):
    """Protocol for log output renderers."""

    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class BoundLogger:
    """Structured logger with bound context. Immutable - bind() returns a new logger.

    Example:
        >>> log = BoundLogger(context={"logger": "replaykit.retry"})
        >>> log.bind(url="https://api.example.com").debug("attempt", attempt=0)
    """

    context: LogContext = field(default_factory=dict)

    def bind(self, **kw: LogValue) -> BoundLogger:
        """Create new logger with additional bound context."""
        return BoundLogger(context={**self.context, **kw})

    def _log(self, level: int, event: str, **kw: LogValue) -> None:
        if level < _state.level:
            return
        _state.renderer.render(LogEntry(time.time(), _level_name(level), event, {**self.context, **kw}))

    def debug(self, event: str, **kw: LogValue) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: LogValue) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: LogValue) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: LogValue) -> None: self._log(logging.ERROR, event, **kw)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class StdlibRenderer:
    """Forward events to stdlib ``logging`` using the bound ``logger`` name."""

    default_name: str = "replaykit"

    def render(self, entry: LogEntry) -> None:
        ctx = dict(entry.context)
        name = str(ctx.pop("logger", None) or self.default_name)
        pairs = " ".join(f"{k}={v!r}" for k, v in sorted(ctx.items()))
        logging.getLogger(name).log(
            logging.getLevelName(entry.level.upper()),
            f"{entry.event} {pairs}" if pairs else entry.event,
        )


@dataclass(slots=True)
class ConsoleRenderer:
    """Human-readable console output: timestamp [level] event key=value ..."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    show_timestamp: bool = True

    def render(self, entry: LogEntry) -> None:
        parts = [_clock(entry.timestamp)] if self.show_timestamp else []
        parts += [f"[{entry.level}]", entry.event]
        parts += [f"{k}={_format_value(v)}" for k, v in sorted(entry.context.items())]
        print(" ".join(parts), file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        stamp = datetime.fromtimestamp(entry.timestamp, tz=UTC).isoformat()
        record = {"timestamp": stamp, "level": entry.level, "event": entry.event, **entry.context}
        print(orjson.dumps(record).decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer for testing."""

    def render(self, entry: LogEntry) -> None:
        pass


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class _LogState:
    renderer: LogRenderer = field(default_factory=StdlibRenderer)
    level: int = logging.DEBUG


# Process-wide so retries running on worker threads honor configure_logging()
_state = _LogState()


def configure_logging(
    format: str = "console",  # noqa: A002 - shadows builtin but matches stdlib
    level: str = "INFO",
    *,
    output: TextIO | None = None,
) -> LogRenderer:
    """Configure global structured logging.

    Args:
        format: "console" (human), "json" (machine), "stdlib" (forward to logging), "none"
        level: Minimum log level - DEBUG, INFO, WARNING, ERROR
        output: Output stream (default: stderr for console, stdout for json)
    """
    match format:
        case "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr)
        case "json": renderer = JsonRenderer(output=output or sys.stdout)
        case "stdlib": renderer = StdlibRenderer()
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', 'stdlib' or 'none'")
    _state.renderer = renderer
    _state.level = getattr(logging, level.upper(), logging.INFO)
    return renderer


def configure_from_settings(settings: LoggingSettings | None = None) -> LogRenderer:
    """Configure logging from ``REPLAYKIT_LOG_*`` settings."""
    if settings is None:
        from replaykit.foundation.config import get_settings
        settings = get_settings().logging
    return configure_logging(settings.format, settings.level)


def reset_logging() -> None:
    """Restore the default stdlib-forwarding configuration."""
    _state.renderer, _state.level = StdlibRenderer(), logging.DEBUG


def get_logger(name: str | None = None, **initial_context: LogValue) -> BoundLogger:
    """Get a structured logger. Name is added to context as 'logger'."""
    return BoundLogger(context={**initial_context, **({"logger": name} if name else {})})


def _level_name(level: int) -> str:
    return logging.getLevelName(level).lower()


def _clock(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


def _format_value(v: LogValue) -> str:
    if isinstance(v, str):
        return f'"{v}"'
    if isinstance(v, bool):
        return str(v).lower()
    return str(v)
