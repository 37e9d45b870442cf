from __future__ import annotations

import json
from pathlib import Path

import pytest

from steadfast.core.global_paths import GlobalPath
from steadfast.util.error import format_error, format_unknown_error
from steadfast.util.log import Log, LogFormat, LogLevel


def test_log_writes_console_and_file(monkeypatch, tmp_path: Path, capsys) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(GlobalPath, "log", classmethod(lambda cls: str(tmp_path)))
    Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=True, file=True, dev=True)

    log = Log.create({"service": "test.log"})
    log.info("hello", {"value": 7})
    Log.close()

    stderr = capsys.readouterr().err
    text = (tmp_path / "dev.log").read_text(encoding="utf-8")

    assert "msg=hello" in stderr
    assert "service=test.log" in stderr
    assert "value=7" in text
    assert Log.file() == str(tmp_path / "dev.log")


def test_log_supports_json_format(monkeypatch, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(GlobalPath, "log", classmethod(lambda cls: str(tmp_path)))
    Log.configure(level=LogLevel.INFO, format=LogFormat.JSON, console=False, file=True, dev=True)

    log = Log.create({"service": "test.json"})
    log.info("hello world", {"meta": {"k": "v"}})
    Log.close()

    line = (tmp_path / "dev.log").read_text(encoding="utf-8").strip()
    payload = json.loads(line)

    assert payload["level"] == "info"
    assert payload["msg"] == "hello world"
    assert payload["service"] == "test.json"
    assert payload["meta"] == {"k": "v"}


def test_level_threshold_filters_lines(capsys) -> None:  # type: ignore[no-untyped-def]
    Log.configure(level=LogLevel.ERROR, format=LogFormat.KV, console=True, file=False)
    assert Log.level() is LogLevel.ERROR

    log = Log.create({"service": "test.threshold"})
    log.debug("quiet")
    log.warn("still quiet")
    log.error("loud")
    log.critical("louder")

    lines = capsys.readouterr().err.splitlines()
    assert len(lines) == 2
    assert "msg=loud" in lines[0]
    assert "level=critical" in lines[1]
    assert "critical=true" in lines[1]


def test_pretty_format_marks_critical(capsys) -> None:  # type: ignore[no-untyped-def]
    Log.configure(level=LogLevel.DEBUG, format=LogFormat.PRETTY, console=True, file=False)

    Log.create({"service": "test.pretty"}).critical("database unreachable", {"host": "db1"})

    err = capsys.readouterr().err
    assert "!! CRITICAL database unreachable" in err
    assert "host=db1" in err


def test_create_caches_by_service() -> None:
    assert Log.create({"service": "test.cache"}) is Log.create({"service": "test.cache"})
    assert Log.create() is not Log.create()


@pytest.mark.parametrize(
    ("text", "level"),
    [
        (None, LogLevel.INFO),
        ("debug", LogLevel.DEBUG),
        ("WARNING", LogLevel.WARN),
        ("warn", LogLevel.WARN),
        ("fatal", LogLevel.CRITICAL),
        ("critical", LogLevel.CRITICAL),
    ],
)
def test_log_level_parse(text: str | None, level: LogLevel) -> None:
    assert LogLevel.parse(text) is level


def test_invalid_level_and_format_raise() -> None:
    with pytest.raises(ValueError):
        LogLevel.parse("chatty")
    with pytest.raises(ValueError):
        LogFormat.parse("xml")


def test_format_error_helpers() -> None:
    from steadfast.errors import NotFoundError

    assert format_error(NotFoundError("gone", "RESOURCE_NOT_FOUND")) == "[RESOURCE_NOT_FOUND] gone (status 404)"
    assert format_error(ValueError("x")) is None
    assert format_unknown_error(ValueError("x")) == "ValueError: x"
    assert format_unknown_error({"a": 1}) == '{\n  "a": 1\n}'
