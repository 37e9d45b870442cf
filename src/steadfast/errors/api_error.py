"""Normalized API error hierarchy.

``ApiError`` is the single shape every failure is converted into before it
is classified. Instances are raisable and read-only once constructed.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .types import Severity


class ApiError(Exception):
    """Structured failure with status code, optional domain code and severity."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Any = None,
        severity: Severity = Severity.ERROR,
        source: str = "API",
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        self.severity = severity
        self.source = source
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        # Dunder slots (__traceback__, __notes__, ...) stay writable for the interpreter.
        if getattr(self, "_frozen", False) and not name.startswith("__"):
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_frozen", False) and not name.startswith("__"):
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__delattr__(name)

    def __reduce__(self):
        # BaseException.__reduce__ restores __dict__ through the guarded __setattr__.
        state = {name: value for name, value in self.__dict__.items() if name != "_frozen"}
        return (_rebuild, (type(self), self.args, state))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code}, "
            f"error_code={self.error_code!r}, severity={self.severity.value!r})"
        )


def _rebuild(cls: type, args: tuple, state: Dict[str, Any]) -> ApiError:
    """Recreate a pickled or copied error without running the subclass __init__."""
    error = cls.__new__(cls)
    error.args = args
    for name, value in state.items():
        setattr(error, name, value)
    error._frozen = True
    return error


class NetworkError(ApiError):
    """No response reached the client (status 0 sentinel)."""

    def __init__(
        self,
        message: str = "A network error occurred. Please check your connection.",
        error_code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, 0, error_code or "NETWORK_ERROR", details, Severity.ERROR, "Network")


class ServerError(ApiError):
    def __init__(
        self,
        message: str = "An unexpected server error occurred.",
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, status_code, error_code or "SERVER_ERROR", details, Severity.CRITICAL)


class UnauthorizedError(ApiError):
    def __init__(
        self,
        message: str = "Authentication failed. Please login again.",
        error_code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, 401, error_code or "UNAUTHORIZED", details, Severity.ERROR, "Authentication")


class ForbiddenError(ApiError):
    def __init__(
        self,
        message: str = "You do not have permission to perform this action.",
        error_code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, 403, error_code or "FORBIDDEN", details, Severity.ERROR, "Authorization")


class BadRequestError(ApiError):
    def __init__(
        self,
        message: str = "The request was invalid.",
        error_code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, 400, error_code or "BAD_REQUEST", details, Severity.WARNING)


class NotFoundError(ApiError):
    def __init__(
        self,
        message: str = "The requested resource was not found.",
        error_code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, 404, error_code or "NOT_FOUND", details, Severity.WARNING)


class ConflictError(ApiError):
    def __init__(
        self,
        message: str = "There was a conflict with the current state of the resource.",
        error_code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, 409, error_code or "CONFLICT", details, Severity.WARNING)


class UnprocessableEntityError(ApiError):
    def __init__(
        self,
        message: str = "The request was well-formed but could not be processed.",
        error_code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, 422, error_code or "UNPROCESSABLE_ENTITY", details, Severity.WARNING)
