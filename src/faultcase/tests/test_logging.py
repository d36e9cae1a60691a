"""Tests for structured logging and misuse reporting."""

from __future__ import annotations

import contextvars
import io

import orjson
import pytest

from faultcase.errors import SchemaException
from faultcase.observability import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    configure_from_settings,
    configure_logging,
    get_logger,
    log_context,
)
from faultcase.config import clear_settings_cache
from faultcase.variants import Schema


class CaptureRenderer:
    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)


def test_json_renderer() -> None:
    out = io.StringIO()
    configure_logging(format="json", level="DEBUG", output=out)
    get_logger("faultcase.test", run=1).info("declared", labels=["a", "b"])

    record = orjson.loads(out.getvalue().strip())
    assert record["level"] == "info"
    assert record["event"] == "declared"
    assert record["logger"] == "faultcase.test"
    assert record["run"] == 1
    assert record["labels"] == ["a", "b"]
    assert "timestamp" in record


def test_console_renderer() -> None:
    out = io.StringIO()
    log = BoundLogger(context={"label": "timeout"}, _renderer=ConsoleRenderer(output=out, show_timestamp=False))
    log.warning("unknown label")
    assert out.getvalue().strip() == '[warning] unknown label label="timeout"'


def test_level_threshold() -> None:
    capture = CaptureRenderer()
    configure_logging(format="none", level="WARNING")
    log = BoundLogger(_renderer=capture)

    log.debug("hidden")
    log.info("hidden")
    log.warning("shown")
    log.error("shown")
    assert [e.level for e in capture.entries] == ["warning", "error"]


def test_explicit_logger_level() -> None:
    capture = CaptureRenderer()
    log = BoundLogger(_renderer=capture, _level=10)
    log.debug("shown")
    assert len(capture.entries) == 1


def test_bind_and_unbind() -> None:
    log = get_logger("x", a=1).bind(b=2)
    assert log.context == {"a": 1, "logger": "x", "b": 2}
    assert log.unbind("a").context == {"logger": "x", "b": 2}


def test_log_context_scope() -> None:
    capture = CaptureRenderer()
    log = BoundLogger(_renderer=capture)

    with log_context(request="r1"):
        log.warning("inside")
    log.warning("outside")

    assert capture.entries[0].context == {"request": "r1"}
    assert capture.entries[1].context == {}


def test_misuse_is_logged() -> None:
    out = io.StringIO()
    configure_logging(format="json", level="WARNING", output=out)
    with pytest.raises(SchemaException):
        Schema(a=int).failure("b", 1)

    record = orjson.loads(out.getvalue().strip())
    assert record["event"] == "schema misuse"
    assert record["code"] == "UNKNOWN_LABEL"
    assert record["label"] == "b"


def test_debug_declaration_logs() -> None:
    out = io.StringIO()
    configure_logging(format="json", level="DEBUG", output=out)
    Schema(divByZero=type(None))
    record = orjson.loads(out.getvalue().strip())
    assert record["event"] == "schema declared"
    assert record["labels"] == ["divByZero"]


def test_configure_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FAULTCASE_LOG_FORMAT", "json")
    clear_settings_cache()
    assert isinstance(configure_from_settings(), JsonRenderer)


def test_first_use_applies_settings(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    """Without configure_logging(), FAULTCASE_LOG_FORMAT and FAULTCASE_LOG_LEVEL take effect."""
    monkeypatch.setenv("FAULTCASE_LOG_FORMAT", "json")
    monkeypatch.setenv("FAULTCASE_LOG_LEVEL", "debug")
    clear_settings_cache()

    contextvars.Context().run(lambda: get_logger("faultcase.test").debug("declared"))

    record = orjson.loads(capsys.readouterr().out.strip())
    assert record["event"] == "declared"
    assert record["level"] == "debug"


def test_first_use_silenced_by_settings(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("FAULTCASE_LOG_FORMAT", "none")
    clear_settings_cache()

    def misuse_unconfigured() -> None:
        with pytest.raises(SchemaException):
            Schema(a=int).failure("b", 1)

    contextvars.Context().run(misuse_unconfigured)
    captured = capsys.readouterr()
    assert captured.out == captured.err == ""


def test_unknown_format() -> None:
    with pytest.raises(ValueError):
        configure_logging(format="xml")
