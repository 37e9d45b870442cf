"""Records shared by the error handling pipeline.

Every record here is created fresh for one failure occurrence and carries no
identity beyond it. ``Severity`` and ``ErrorCategory`` are closed sets; the
tables keyed by them are checked with :func:`require_every_category`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

V = TypeVar("V")


class Severity(str, Enum):
    """Escalation level of a failure, ordered INFO < WARNING < ERROR < CRITICAL."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: str) -> "Severity":
        text = value.strip().lower()
        if text == "warn":
            return cls.WARNING
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"invalid severity: {value}") from None


_SEVERITY_RANK = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
    Severity.CRITICAL: 3,
}


class ErrorCategory(str, Enum):
    """Closed set of buckets every failure is classified into."""

    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NETWORK = "network"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER = "server"
    UNKNOWN = "unknown"


def require_every_category(table: Mapping[ErrorCategory, V], name: str) -> Mapping[ErrorCategory, V]:
    """Fail loudly when a category-keyed table misses a category.

    Called on module-level tables at import time, so adding a category
    without extending every table breaks the import instead of a lookup.
    """
    missing = [category.value for category in ErrorCategory if category not in table]
    if missing:
        raise RuntimeError(f"{name} has no entry for: {', '.join(missing)}")
    return table


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorContext(BaseModel):
    """Caller-supplied provenance for one failure occurrence."""

    operation: str
    module: str
    user_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    additional_data: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(frozen=True)

    def with_data(self, **values: Any) -> "ErrorContext":
        """Return a copy whose additional data also holds ``values``."""
        merged = {**(self.additional_data or {}), **values}
        return self.model_copy(update={"additional_data": merged})

    def log_tags(self) -> Dict[str, Any]:
        tags: Dict[str, Any] = {
            "operation": self.operation,
            "module": self.module,
            "user_id": self.user_id,
        }
        if self.additional_data:
            tags["data"] = self.additional_data
        return tags


def create_context(
    operation: str,
    module: str,
    additional_data: Optional[Mapping[str, Any]] = None,
    user_id: Optional[str] = None,
) -> ErrorContext:
    """Build an :class:`ErrorContext` stamped with the current time."""
    return ErrorContext(
        operation=operation,
        module=module,
        user_id=user_id,
        additional_data=dict(additional_data) if additional_data is not None else None,
    )


class HandlingResult(BaseModel):
    """What a caller should show and do after a failure."""

    user_message: str
    should_retry: bool
    retry_delay_ms: Optional[int] = None
    should_log: bool
    severity: Severity
    category: ErrorCategory

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _delay_only_when_retrying(self) -> "HandlingResult":
        if self.should_retry != (self.retry_delay_ms is not None):
            raise ValueError("retry_delay_ms must be set exactly when should_retry is true")
        if not self.user_message:
            raise ValueError("user_message must not be empty")
        return self


class ReportedError(BaseModel):
    """Error section of an :class:`ErrorReport`."""

    code: str
    message: str
    user_friendly_message: Optional[str] = None
    category: Optional[ErrorCategory] = None
    severity: Severity
    retryable: bool = False
    timestamp: datetime = Field(default_factory=_utcnow)
    stack: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class ErrorReport(BaseModel):
    """Payload handed to the logger's report channel for CRITICAL failures."""

    error: ReportedError
    context: Optional[ErrorContext] = None

    model_config = ConfigDict(frozen=True)
