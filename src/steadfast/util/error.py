"""Error formatting utilities.

Turns failures into strings for logs and reports. Nothing here is meant to
be shown to end users; user-facing text comes from the message resolver.
"""

import json
import traceback
from typing import Any


def format_error(error: Any) -> str | None:
    """Format a normalized API error as ``[CODE] message (status N)``.

    Returns None for objects that do not carry a status code, allowing
    fallback to format_unknown_error.
    """
    status = getattr(error, "status_code", None)
    if not isinstance(status, int) or not isinstance(error, Exception):
        return None
    code = getattr(error, "error_code", None)
    prefix = f"[{code}] " if code else ""
    return f"{prefix}{error} (status {status})"


def format_stack(error: BaseException) -> str | None:
    """Return the formatted traceback of a raised exception, if it has one."""
    if error.__traceback__ is None:
        return None
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def format_unknown_error(error: Any) -> str:
    """Format any error into a string representation.

    Handles exceptions (with traceback when available), JSON-serializable
    containers and primitives.
    """
    if isinstance(error, BaseException):
        stack = format_stack(error)
        if stack:
            return stack
        return f"{error.__class__.__name__}: {error}"

    if isinstance(error, (dict, list)):
        try:
            return json.dumps(error, indent=2)
        except (TypeError, ValueError):
            return "Unexpected error (unserializable)"

    return str(error)
