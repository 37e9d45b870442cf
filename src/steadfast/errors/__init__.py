"""Error handling and resilience core.

Classifies failures into a closed taxonomy, decides retry eligibility and
backoff, resolves user-facing messages and routes logging and reporting.
"""

from .api_error import (
    ApiError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    UnprocessableEntityError,
)
from .classify import classify
from .handler import ErrorHandler, handle_error
from .messages import format_validation_errors, resolve_message
from .normalize import normalize
from .policy import PolicyTable, RetryPolicy, backoff_delay_ms, policy_for
from .reporting import ErrorLogger, LogErrorLogger, log_level_for, should_log
from .retry import RetryCancelledError, with_retry
from .types import (
    ErrorCategory,
    ErrorContext,
    ErrorReport,
    HandlingResult,
    ReportedError,
    Severity,
    create_context,
)

__all__ = [
    "ApiError",
    "BadRequestError",
    "ConflictError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorHandler",
    "ErrorLogger",
    "ErrorReport",
    "ForbiddenError",
    "HandlingResult",
    "LogErrorLogger",
    "NetworkError",
    "NotFoundError",
    "PolicyTable",
    "ReportedError",
    "RetryCancelledError",
    "RetryPolicy",
    "ServerError",
    "Severity",
    "UnauthorizedError",
    "UnprocessableEntityError",
    "backoff_delay_ms",
    "classify",
    "create_context",
    "format_validation_errors",
    "handle_error",
    "log_level_for",
    "normalize",
    "policy_for",
    "resolve_message",
    "should_log",
    "with_retry",
]
