"""Structured logging with console and file sinks.

Loggers carry a set of tags that are rendered with every line. Output is
key=value by default, with JSON and human-oriented PRETTY formats available.
CRITICAL sits above ERROR and is rendered on its own channel so that
operators can route it separately.
"""

import json
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from ..core.global_paths import GlobalPath


class LogLevel(str, Enum):
    """Log severity levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def parse(cls, value: str | None) -> "LogLevel":
        if value is None:
            return cls.INFO
        text = value.strip().lower()
        if text in {"warn", "warning"}:
            return cls.WARN
        if text in {"critical", "fatal"}:
            return cls.CRITICAL
        for level in cls:
            if level.value.lower() == text:
                return level
        raise ValueError(f"invalid log level: {value}")


class LogFormat(str, Enum):
    """Log output format."""

    KV = "kv"
    JSON = "json"
    PRETTY = "pretty"

    @classmethod
    def parse(cls, value: str | None) -> "LogFormat":
        if value is None:
            return cls.KV
        text = value.strip().lower()
        for fmt in cls:
            if fmt.value == text:
                return fmt
        raise ValueError(f"invalid log format: {value}")


LEVEL_PRIORITY = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
    LogLevel.CRITICAL: 4,
}

_RESERVED = ("time", "delta_ms", "level", "msg")

# Number of timestamped log files kept in the log directory.
KEEP_LOG_FILES = 10


@dataclass
class LogConfig:
    """Process-wide sink configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.KV
    console: bool = False
    file: bool = False
    log_file_path: Optional[str] = None
    _file_handle: Optional[TextIO] = None


_config = LogConfig()
_last_timestamp = time.time()


def _describe_error(error: BaseException, depth: int = 0) -> str:
    text = str(error) or type(error).__name__
    if error.__cause__ is not None and depth < 10:
        text += " Caused by: " + _describe_error(error.__cause__, depth + 1)
    return text


def _normalize(value: Any) -> Any:
    if isinstance(value, BaseException):
        return _describe_error(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (dict, list, tuple, int, float, bool)) or value is None:
        return value
    return str(value)


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    text = str(value)
    if text == "" or any(ch.isspace() for ch in text) or "=" in text:
        return json.dumps(text, ensure_ascii=False)
    return text


class Logger:
    """Tagged logger writing to the configured sinks."""

    def __init__(self, tags: Optional[Dict[str, Any]] = None):
        self.tags = tags or {}

    def enabled(self, level: LogLevel) -> bool:
        return LEVEL_PRIORITY[level] >= LEVEL_PRIORITY[_config.level]

    def payload(
        self,
        level: LogLevel,
        message: Any,
        extra: Optional[Dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Build the normalized event dict for one log line."""
        global _last_timestamp

        now = time.time()
        delta_ms = int((now - _last_timestamp) * 1000)
        _last_timestamp = now

        merged = {**self.tags, **(extra or {})}
        fields = {k: _normalize(v) for k, v in merged.items() if v is not None}
        return {
            "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "delta_ms": delta_ms,
            "level": level.value.lower(),
            "msg": _normalize(message),
            **fields,
        }

    def render(
        self,
        level: LogLevel,
        message: Any,
        extra: Optional[Dict[str, Any]] = None,
    ) -> str:
        event = self.payload(level, message, extra)
        if _config.format == LogFormat.JSON:
            return json.dumps(event, ensure_ascii=False, separators=(",", ":"), default=str) + "\n"

        pairs = " ".join(
            f"{key}={_render_value(value)}"
            for key, value in event.items()
            if key not in _RESERVED
        )
        if _config.format == LogFormat.PRETTY:
            label = "!! CRITICAL" if level == LogLevel.CRITICAL else level.value
            text = str(event.get("msg") or "")
            suffix = f" ({pairs})" if pairs else ""
            return f"{event['time']} {label} {text}{suffix} +{event['delta_ms']}ms\n"

        head = [
            str(event["time"]),
            f"+{event['delta_ms']}ms",
            f"level={event['level']}",
            f"msg={_render_value(event.get('msg'))}",
        ]
        if pairs:
            head.append(pairs)
        return " ".join(head) + "\n"

    def emit(self, level: LogLevel, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        """Write one event at ``level`` if the configured threshold allows it."""
        if not self.enabled(level):
            return
        line = self.render(level, message, extra)
        if _config.console:
            sys.stderr.write(line)
            sys.stderr.flush()
        if _config.file and _config._file_handle:
            _config._file_handle.write(line)
            _config._file_handle.flush()

    def debug(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.DEBUG, message, extra)

    def info(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.INFO, message, extra)

    def warn(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.WARN, message, extra)

    def warning(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        """Alias for warn()."""
        self.warn(message, extra)

    def error(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self.emit(LogLevel.ERROR, message, extra)

    def critical(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log on the critical channel, always tagged ``critical=true``."""
        self.emit(LogLevel.CRITICAL, message, {**(extra or {}), "critical": True})


class Log:
    """Logger factory and process-wide sink configuration."""

    _loggers: Dict[str, Logger] = {}

    @classmethod
    def create(cls, tags: Optional[Dict[str, Any]] = None) -> Logger:
        """Return a logger, cached by its ``service`` tag when one is given."""
        tags = tags or {}
        service = tags.get("service")
        if not isinstance(service, str) or not service:
            return Logger(tags=tags)
        if service not in cls._loggers:
            cls._loggers[service] = Logger(tags=tags)
        return cls._loggers[service]

    @classmethod
    def configure(
        cls,
        *,
        level: LogLevel | None = None,
        format: LogFormat | None = None,
        console: bool | None = None,
        file: bool | None = None,
        dev: bool = False,
    ) -> None:
        """Configure the log threshold, format and sinks."""
        if level is not None:
            _config.level = level
        if format is not None:
            _config.format = format
        if console is not None:
            _config.console = console
        _config.file = True if file is None else file

        cls.close()
        if not _config.file:
            _config.log_file_path = None
            return

        log_dir = Path(GlobalPath.log())
        log_dir.mkdir(parents=True, exist_ok=True)
        cls._cleanup_logs(log_dir)
        if dev:
            log_path = log_dir / "dev.log"
        else:
            stamp = datetime.now().isoformat().split(".")[0].replace(":", "")
            log_path = log_dir / f"{stamp}.log"

        _config.log_file_path = str(log_path)
        _config._file_handle = log_path.open("w", encoding="utf-8")

    @classmethod
    def level(cls) -> LogLevel:
        return _config.level

    @classmethod
    def file(cls) -> str:
        """Current log file path, empty when file output is off."""
        return _config.log_file_path or ""

    @classmethod
    def _cleanup_logs(cls, log_dir: Path) -> None:
        stamped = sorted(
            log_dir.glob("????-??-??T??????.log"),
            key=lambda p: p.stat().st_mtime,
        )
        for old in stamped[:-KEEP_LOG_FILES]:
            old.unlink(missing_ok=True)

    @classmethod
    def close(cls) -> None:
        """Close the log file handle if open."""
        if _config._file_handle:
            _config._file_handle.close()
            _config._file_handle = None
