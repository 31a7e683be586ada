"""Tests for structured logging and its use by the executor."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

import orjson
import pytest

from replaykit.foundation.config import LoggingSettings
from replaykit.foundation.errors import ExhaustionError
from replaykit.foundation.testing import ScriptedTransport
from replaykit.io import new_request
from replaykit.runtime.observability import (
    LogEntry,
    configure_from_settings,
    configure_logging,
    get_logger,
    reset_logging,
)
from replaykit.runtime.observability import logging as rk_logging
from replaykit.runtime.retry import ExecutorConfig, RetryExecutor


@dataclass
class CaptureRenderer:
    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)


@pytest.fixture
def captured() -> Iterator[CaptureRenderer]:
    renderer = CaptureRenderer()
    rk_logging._state.renderer = renderer
    yield renderer
    reset_logging()


def test_bound_context_merges(captured: CaptureRenderer) -> None:
    log = get_logger("svc", region="eu").bind(attempt=2)
    log.info("retrying", delay=0.1)
    entry = captured.entries[0]
    assert (entry.level, entry.event) == ("info", "retrying")
    assert entry.context == {"region": "eu", "logger": "svc", "attempt": 2, "delay": 0.1}


def test_level_filter(captured: CaptureRenderer) -> None:
    rk_logging._state.level = logging.WARNING
    log = get_logger("svc")
    log.info("hidden")
    log.warning("shown")
    assert [e.event for e in captured.entries] == ["shown"]


def test_executor_logs_retries_and_give_up(captured: CaptureRenderer) -> None:
    transport = ScriptedTransport([500])
    executor = RetryExecutor(transport, ExecutorConfig(retries_max=2), sleep=lambda _: None)

    with pytest.raises(ExhaustionError):
        executor.do(new_request("GET", "https://api.example.test/x"))

    events = [(e.level, e.event, e.context.get("attempt") or e.context.get("attempts")) for e in captured.entries]
    assert events == [("info", "retrying", 1), ("info", "retrying", 2), ("warning", "giving up", 3)]
    assert all(e.context["url"] == "https://api.example.test/x" for e in captured.entries)
    assert captured.entries[0].context["status"] == 500


def test_json_renderer_outputs_lines() -> None:
    out = io.StringIO()
    configure_logging("json", "DEBUG", output=out)
    try:
        get_logger("svc").debug("attempt", n=1)
    finally:
        reset_logging()
    record = orjson.loads(out.getvalue())
    assert record["event"] == "attempt"
    assert record["n"] == 1
    assert record["logger"] == "svc"
    assert record["timestamp"].endswith("+00:00")


def test_console_renderer_format() -> None:
    out = io.StringIO()
    configure_logging("console", output=out)
    try:
        get_logger("svc").info("done", ok=True)
    finally:
        reset_logging()
    line = out.getvalue().strip()
    assert "[info] done" in line
    assert 'logger="svc"' in line
    assert "ok=true" in line


def test_stdlib_forwarding(caplog: pytest.LogCaptureFixture) -> None:
    reset_logging()
    with caplog.at_level(logging.INFO, logger="replaykit.test"):
        get_logger("replaykit.test").info("forwarded", attempt=1)
    assert any(r.name == "replaykit.test" and "forwarded attempt=1" in r.getMessage() for r in caplog.records)


def test_configure_from_settings() -> None:
    try:
        renderer = configure_from_settings(LoggingSettings(format="none", level="ERROR"))
        assert type(renderer).__name__ == "NoOpRenderer"
        assert rk_logging._state.level == logging.ERROR
    finally:
        reset_logging()


def test_unknown_format_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        configure_logging("xml")
