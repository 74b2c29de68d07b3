# tests/bundler/core/test_logging.py
from __future__ import annotations
import json
import sys
import logging

from bundler.app.config import initConfig
from bundler.core.logging import (
    clearLogContext,
    configureLogging,
    getComponentLogger,
    getLogContext,
    logContext,
    setLogContext,
)
from bundler.core.logging.filters import RecurringSuppressFilter
from bundler.core.logging.formatters import DevFormatter, JsonFormatter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _record(msg: str, *args, name: str = "tests.logging", level: int = logging.WARNING) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, msg, args, None)


# -------- context --------

def test_log_context_scoping():
    clearLogContext()
    assert getLogContext() is None

    with logContext(bundle="web.assets"):
        assert getLogContext() == {"bundle": "web.assets"}
        with logContext(component="shop", ignored=None):
            assert getLogContext() == {"bundle": "web.assets", "component": "shop"}
        assert getLogContext() == {"bundle": "web.assets"}
    assert getLogContext() is None


def test_set_and_clear_log_context():
    setLogContext(bundle="web.assets")
    setLogContext(component="base")
    assert getLogContext() == {"bundle": "web.assets", "component": "base"}
    clearLogContext()
    assert getLogContext() is None


def test_component_logger_namespace():
    assert getComponentLogger(" shop ").name == "components.shop"


# -------- formatters --------

def test_dev_formatter_appends_context():
    record = _record("Resolved %d asset(s)", 3)
    with logContext(bundle="web.assets", component="shop"):
        line = DevFormatter().format(record)
    assert line == "WARNING: [tests.logging] Resolved 3 asset(s) [web.assets/shop]"
    assert DevFormatter().format(record) == "WARNING: [tests.logging] Resolved 3 asset(s)"


def test_json_formatter_emits_one_line_document():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("tests.logging", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    with logContext(bundle="web.assets"):
        line = JsonFormatter().format(record)
    assert "\n" not in line
    doc = json.loads(line)
    assert doc["level"] == "error"
    assert doc["msg"] == "failed"
    assert doc["ctx"] == {"bundle": "web.assets"}
    assert doc["exc"]["type"] == "ValueError"
    assert doc["exc"]["message"] == "boom"


# -------- recurring suppression --------

def test_recurring_messages_are_suppressed_then_summarized(caplog):
    clock = FakeClock()
    flt = RecurringSuppressFilter(windowSeconds=10, maxPerWindow=2, clock=clock)

    assert flt.filter(_record("same"))
    assert flt.filter(_record("same"))
    assert not flt.filter(_record("same"))
    assert not flt.filter(_record("same"))
    # different message, independent key
    assert flt.filter(_record("other"))

    clock.now += 11
    with caplog.at_level(logging.INFO, logger="tests.logging"):
        assert flt.filter(_record("same"))
    assert "Suppressed 2 repeated logs: same" in caplog.text

    caplog.clear()
    with caplog.at_level(logging.INFO, logger="tests.logging"):
        assert flt.filter(_record("same"))
    assert "Suppressed" not in caplog.text


def test_whitespace_is_normalized_into_one_key():
    flt = RecurringSuppressFilter(windowSeconds=10, maxPerWindow=1, clock=FakeClock())
    assert flt.filter(_record("path  did\tnot resolve"))
    assert not flt.filter(_record("path did not resolve"))


# -------- setup --------

def test_configure_logging_from_config(tmp_path):
    logFile = tmp_path / "bundler.log"
    initConfig(overrides={
        "debug": {"devModeEnabled": False, "suppressRecurringMessages": {"enabled": True}},
        "logging": {"file": {"enabled": True, "path": str(logFile)}},
    })
    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    try:
        configureLogging()
        assert root.level == logging.INFO
        assert len(root.handlers) == 2
        assert isinstance(root.handlers[0].formatter, DevFormatter)
        assert isinstance(root.handlers[1].formatter, JsonFormatter)
        assert all(
            any(isinstance(flt, RecurringSuppressFilter) for flt in handler.filters)
            for handler in root.handlers
        )
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])


def test_shared_filter_counts_each_record_once():
    flt = RecurringSuppressFilter(windowSeconds=10, maxPerWindow=2, clock=FakeClock())
    first, second, third = _record("same"), _record("same"), _record("same")

    # console and file handlers both consult the same filter
    for record in (first, second):
        assert flt.filter(record)
        assert flt.filter(record)
    assert not flt.filter(third)
    assert not flt.filter(third)
