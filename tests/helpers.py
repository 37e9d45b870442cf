"""Shared test helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from steadfast.errors.types import ErrorContext, ErrorReport
from steadfast.util.log import LogLevel


@dataclass
class LogCall:
    level: LogLevel
    message: str
    error: Optional[BaseException]
    context: Optional[ErrorContext]


class CapturingLogger:
    """ErrorLogger stub that records every call."""

    def __init__(self) -> None:
        self.logs: List[LogCall] = []
        self.reports: List[ErrorReport] = []

    def log(
        self,
        level: LogLevel,
        message: str,
        error: Optional[BaseException] = None,
        context: Optional[ErrorContext] = None,
    ) -> None:
        self.logs.append(LogCall(level, message, error, context))

    def report(self, report: ErrorReport) -> None:
        self.reports.append(report)


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that returns at once and records waits."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
