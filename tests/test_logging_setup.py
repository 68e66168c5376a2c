"""Unit tests for logging setup helpers."""

from __future__ import annotations

import io
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from unit_watcher.utils import logging_setup as ls


def _record(msg: str = "example", level: int = logging.INFO, name: str = "test") -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_q_formats_values() -> None:
    assert ls._q(None) == "null"
    assert ls._q(True) == "true"
    assert ls._q(3.14) == "3.14"
    assert ls._q("hello world") == '"hello world"'
    assert ls._q("") == '""'
    assert ls._q('say "hi"\n') == '"say \\"hi\\"\\n"'


def test_collect_extra_merges_custom_fields() -> None:
    record = _record()
    record.extra = {"foo": "bar"}
    record.custom = 1

    extra = ls._collect_extra(record)

    assert extra["foo"] == "bar"
    assert extra["custom"] == 1
    assert "msg" not in extra


def test_logfmt_formatter_includes_extra_fields() -> None:
    formatter = ls._LogfmtFormatter()
    record = _record("alert triggered", logging.WARNING, "logfmt")
    record.extra = {"unit": "nginx.service"}
    record.tag = "alert"

    formatted = formatter.format(record)

    assert "lvl=warning" in formatted
    assert "tag=alert" in formatted
    assert "unit=nginx.service" in formatted
    assert 'msg="alert triggered"' in formatted


def test_logfmt_formatter_defaults_tag_to_logger_name() -> None:
    formatted = ls._LogfmtFormatter().format(_record(name="unit_watcher.runner"))
    assert "tag=unit_watcher.runner" in formatted


def test_json_formatter_serializes_payload() -> None:
    formatter = ls._JsonFormatter()
    record = _record("failure", logging.ERROR, "json")
    record.extra = {"count": 2}

    payload = json.loads(formatter.format(record))

    assert payload["msg"] == "failure"
    assert payload["level"] == "error"
    assert payload["count"] == 2


def test_json_formatter_converts_non_scalar_fields() -> None:
    record = _record("tick", logging.INFO, "json")
    record.extra = {
        "at": datetime(2024, 7, 1, 9, 30, tzinfo=timezone.utc),
        "cooldown": timedelta(minutes=10),
        "state_path": Path("/tmp/s.json"),
    }

    payload = json.loads(ls._JsonFormatter().format(record))

    assert payload["at"] == "2024-07-01T09:30:00+00:00"
    assert payload["cooldown"] == 600.0
    assert payload["state_path"] == "/tmp/s.json"


def test_log_event_respects_requested_level(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="event.tag")

    ls.log_event("event.tag", level="warning", detail="value")

    record = caplog.records[-1]
    assert record.levelname == "WARNING"
    assert record.tag == "event.tag"
    assert record.extra == {"detail": "value"}


def test_log_event_unknown_level_falls_back_to_info(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="event.other")
    ls.log_event("event.other", level="chatty", n=1)
    assert caplog.records[-1].levelname == "INFO"


def test_setup_root_logger_installs_single_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    stream = io.StringIO()
    monkeypatch.setattr(ls.sys, "stdout", stream)
    try:
        ls.setup_root_logger("debug", "json")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ls._JsonFormatter)
        logging.getLogger("probe").info("hello")
        assert json.loads(stream.getvalue().splitlines()[-1])["msg"] == "hello"

        ls.setup_root_logger("bogus", "logfmt")
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, ls._LogfmtFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
