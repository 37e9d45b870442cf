"""Default normalizer: convert raw failures into :class:`ApiError`.

Handles ``httpx`` status and transport failures, builtin transport
exceptions, already-normalized errors and anything else a caller may raise.
The backend payload shape is read leniently: ``message`` / ``error.message``
for the text and ``errorCode`` / ``error.code`` for the domain code.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

import httpx

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

Normalizer = Callable[[Any], ApiError]

_STATUS_ERRORS: Dict[int, type[ApiError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    422: UnprocessableEntityError,
}

_SERVER_STATUSES = frozenset({500, 502, 503, 504})

_NETWORK_HINTS = ("network error", "timeout")

UNKNOWN_MESSAGE = "An unexpected error occurred"


def _payload(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except (ValueError, httpx.ResponseNotRead):
        # Undecodable or unread streamed body; fall back to the exception text.
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def _body_fields(data: Dict[str, Any]) -> Tuple[Optional[str], Optional[str], Any]:
    nested = data.get("error")
    if not isinstance(nested, dict):
        nested = {}
    message = data.get("message") or nested.get("message")
    code = data.get("errorCode") or nested.get("code")
    return (
        str(message) if message else None,
        str(code) if code else None,
        data.get("details"),
    )


def from_response(response: httpx.Response, fallback_message: str = "") -> ApiError:
    """Build the status-specific error for a failed HTTP response."""
    status = response.status_code
    message, code, details = _body_fields(_payload(response))
    message = message or fallback_message or "An unknown API error occurred"

    if status in _SERVER_STATUSES:
        return ServerError(message, status, code, details)
    error_type = _STATUS_ERRORS.get(status)
    if error_type is not None:
        return error_type(message, code, details)
    return ApiError(message, status, code, details)


def normalize(raw: Any) -> ApiError:
    """Convert any raised value into an :class:`ApiError`.

    Never raises. Unrecognized exceptions become a generic 500 error with
    code ``UNKNOWN_ERROR`` so they still flow through classification.
    """
    if isinstance(raw, ApiError):
        return raw

    if isinstance(raw, httpx.HTTPStatusError):
        return from_response(raw.response, str(raw))

    if isinstance(raw, (httpx.TimeoutException, TimeoutError)):
        return NetworkError(str(raw) or "Request timed out", "REQUEST_TIMEOUT", raw)

    if isinstance(raw, (httpx.TransportError, ConnectionError)):
        return NetworkError(str(raw) or "Connection failed", details=raw)

    if isinstance(raw, Exception):
        text = str(raw)
        if any(hint in text.lower() for hint in _NETWORK_HINTS):
            return NetworkError(text, details=raw)
        return ApiError(text or UNKNOWN_MESSAGE, 500, "UNKNOWN_ERROR", raw)

    return ApiError(UNKNOWN_MESSAGE, 500, "UNKNOWN_ERROR")
