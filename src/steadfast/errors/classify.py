"""Status-code classification into :class:`ErrorCategory`."""

from __future__ import annotations

from typing import Dict

from .api_error import ApiError
from .types import ErrorCategory

# Status 0 is the no-transport sentinel set by the normalizer.
STATUS_CATEGORIES: Dict[int, ErrorCategory] = {
    0: ErrorCategory.NETWORK,
    401: ErrorCategory.AUTHENTICATION,
    403: ErrorCategory.AUTHORIZATION,
    404: ErrorCategory.NOT_FOUND,
    409: ErrorCategory.CONFLICT,
    422: ErrorCategory.VALIDATION,
    500: ErrorCategory.SERVER,
    502: ErrorCategory.SERVER,
    503: ErrorCategory.SERVER,
    504: ErrorCategory.SERVER,
}


def classify(error: ApiError) -> ErrorCategory:
    """Map an error to exactly one category; unmapped statuses are UNKNOWN."""
    return STATUS_CATEGORIES.get(error.status_code, ErrorCategory.UNKNOWN)
