"""Logging and reporting decisions for handled errors.

The router decides whether a failure is worth a log line and at which
level; CRITICAL failures are additionally packaged into an
:class:`ErrorReport` for the logger's report channel. The sink itself is
pluggable through the :class:`ErrorLogger` protocol.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from ..util.error import format_error, format_stack, format_unknown_error
from ..util.log import Log, Logger, LogLevel
from .api_error import ApiError
from .types import ErrorCategory, ErrorContext, ErrorReport, ReportedError, Severity

_LEVELS: Dict[Severity, LogLevel] = {
    Severity.INFO: LogLevel.INFO,
    Severity.WARNING: LogLevel.WARN,
    Severity.ERROR: LogLevel.ERROR,
    Severity.CRITICAL: LogLevel.CRITICAL,
}

if set(_LEVELS) != set(Severity):
    raise RuntimeError("every severity needs a log level")

# Categories logged whatever their severity.
_ALWAYS_LOGGED = frozenset({
    ErrorCategory.SERVER,
    ErrorCategory.NETWORK,
    ErrorCategory.AUTHENTICATION,
})


class ErrorLogger(Protocol):
    """Sink for handled errors."""

    def log(
        self,
        level: LogLevel,
        message: str,
        error: Optional[BaseException] = None,
        context: Optional[ErrorContext] = None,
    ) -> None: ...

    def report(self, report: ErrorReport) -> None: ...


class LogErrorLogger:
    """Default sink writing through the structured application logger."""

    def __init__(self, logger: Optional[Logger] = None):
        self._log = logger or Log.create({"service": "errors"})

    def log(
        self,
        level: LogLevel,
        message: str,
        error: Optional[BaseException] = None,
        context: Optional[ErrorContext] = None,
    ) -> None:
        extra: Dict[str, Any] = {}
        if context is not None:
            extra.update(context.log_tags())
        if error is not None:
            extra.update(_error_tags(error))
        if level == LogLevel.CRITICAL:
            self._log.critical(message, extra)
            return
        self._log.emit(level, message, extra)

    def report(self, report: ErrorReport) -> None:
        self._log.error("error reported", {"report": report.model_dump(mode="json", exclude_none=True)})


def _error_tags(error: BaseException) -> Dict[str, Any]:
    if isinstance(error, ApiError):
        return {
            "status_code": error.status_code,
            "error_code": error.error_code,
            "severity": error.severity,
            "error": format_error(error),
        }
    return {"error": format_unknown_error(error)}


def should_log(error: ApiError, category: ErrorCategory) -> bool:
    """Whether a handled error gets a log line."""
    if error.severity == Severity.CRITICAL:
        return True
    if category in _ALWAYS_LOGGED:
        return True
    if category == ErrorCategory.VALIDATION:
        return False
    return error.severity == Severity.ERROR


def log_level_for(severity: Severity) -> LogLevel:
    return _LEVELS[severity]


def should_report(error: ApiError) -> bool:
    return error.severity == Severity.CRITICAL


def build_report(
    error: ApiError,
    category: ErrorCategory,
    user_message: str,
    retryable: bool,
    context: Optional[ErrorContext] = None,
) -> ErrorReport:
    """Package a CRITICAL failure for the report channel."""
    return ErrorReport(
        error=ReportedError(
            code=error.error_code or f"HTTP_{error.status_code}",
            message=error.message,
            user_friendly_message=user_message,
            category=category,
            severity=error.severity,
            retryable=retryable,
            stack=_stack_of(error),
        ),
        context=context,
    )


def _stack_of(error: ApiError) -> Optional[str]:
    stack = format_stack(error)
    if stack is not None:
        return stack
    # Normalized errors keep the original exception in details.
    if isinstance(error.details, BaseException):
        return format_stack(error.details)
    return None
