"""User-facing message resolution.

Precedence, first match wins: a caller override keyed by the error code,
the category's variant for a known specific code, the category default.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .api_error import ApiError
from .types import ErrorCategory, require_every_category

DEFAULT = "default"

USER_MESSAGES: Mapping[ErrorCategory, Mapping[str, str]] = require_every_category(
    {
        ErrorCategory.AUTHENTICATION: {
            DEFAULT: "Please log in again to continue.",
            "expired": "Your session has expired. Please log in again.",
            "invalid": "Invalid credentials. Please check your login details.",
        },
        ErrorCategory.AUTHORIZATION: {
            DEFAULT: "You don't have permission to perform this action.",
            "insufficient": "You need additional permissions for this operation.",
            "role_required": "This action requires a specific role.",
        },
        ErrorCategory.NETWORK: {
            DEFAULT: "Connection failed. Please check your internet connection.",
            "timeout": "Request timed out. Please try again.",
            "offline": "You appear to be offline. Please check your connection.",
        },
        ErrorCategory.VALIDATION: {
            DEFAULT: "Please check your input and try again.",
            "required": "This field is required.",
            "format": "Please use the correct format.",
            "length": "The input is too long or too short.",
        },
        ErrorCategory.NOT_FOUND: {
            DEFAULT: "The requested item was not found.",
            "resource": "The resource you're looking for doesn't exist.",
            "page": "The page you're looking for doesn't exist.",
        },
        ErrorCategory.CONFLICT: {
            DEFAULT: "This action conflicts with the current state.",
            "duplicate": "This item already exists.",
            "locked": "This item is currently in use.",
        },
        ErrorCategory.SERVER: {
            DEFAULT: "Something went wrong on our end. Please try again later.",
            "maintenance": "We're currently performing maintenance. Please try again later.",
            "overloaded": "Our servers are busy. Please try again in a moment.",
        },
        ErrorCategory.UNKNOWN: {
            DEFAULT: "An unexpected error occurred. Please try again.",
        },
    },
    "USER_MESSAGES",
)

# Error code -> variant key looked up in the category's message table.
SPECIFIC_CODES: Dict[str, str] = {
    "SESSION_EXPIRED": "expired",
    "TOKEN_EXPIRED": "expired",
    "INVALID_CREDENTIALS": "invalid",
    "INSUFFICIENT_PERMISSIONS": "insufficient",
    "ROLE_REQUIRED": "role_required",
    "REQUEST_TIMEOUT": "timeout",
    "OFFLINE": "offline",
    "REQUIRED_FIELD": "required",
    "INVALID_FORMAT": "format",
    "INVALID_LENGTH": "length",
    "RESOURCE_NOT_FOUND": "resource",
    "PAGE_NOT_FOUND": "page",
    "DUPLICATE_ENTRY": "duplicate",
    "RESOURCE_LOCKED": "locked",
    "MAINTENANCE_MODE": "maintenance",
    "SERVER_OVERLOADED": "overloaded",
}

for _category, _messages in USER_MESSAGES.items():
    if not _messages.get(DEFAULT):
        raise RuntimeError(f"USER_MESSAGES[{_category.value}] has no default message")


def specific_message(error: ApiError, category: ErrorCategory) -> Optional[str]:
    """Category variant for the error's code, or None when there is none."""
    variant = SPECIFIC_CODES.get(error.error_code or "")
    if variant is None:
        return None
    return USER_MESSAGES[category].get(variant)


def resolve_message(
    error: ApiError,
    category: ErrorCategory,
    custom_messages: Optional[Mapping[str, str]] = None,
) -> str:
    """Resolve the text shown to the user; never empty."""
    if custom_messages and error.error_code:
        override = custom_messages.get(error.error_code)
        if override:
            return override

    return specific_message(error, category) or USER_MESSAGES[category][DEFAULT]


def _field_line(field: Any, message: Any) -> str:
    return f"{field}: {message}" if field else str(message)


def format_validation_errors(details: Any) -> List[str]:
    """Flatten the field errors carried in ``ApiError.details`` for display.

    Accepted shapes: a list of ``{"field", "message"}`` items (or plain
    strings), the same list under an ``"errors"`` key, or a mapping of field
    name to one message or a list of messages. Anything else yields ``[]``.
    The result is shown next to the resolved message, never instead of it.
    """
    if isinstance(details, Mapping) and isinstance(details.get("errors"), list):
        details = details["errors"]

    lines: List[str] = []
    if isinstance(details, list):
        for item in details:
            if isinstance(item, Mapping):
                if item.get("message"):
                    lines.append(_field_line(item.get("field"), item["message"]))
            elif isinstance(item, str) and item:
                lines.append(item)
        return lines

    if isinstance(details, Mapping):
        for field, messages in details.items():
            if isinstance(messages, str):
                messages = [messages]
            if not isinstance(messages, list):
                continue
            lines.extend(_field_line(field, message) for message in messages if message)
    return lines
