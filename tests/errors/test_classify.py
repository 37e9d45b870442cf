import pytest

from steadfast.errors import (
    ApiError,
    BadRequestError,
    ErrorCategory,
    NetworkError,
    ServerError,
    classify,
)


@pytest.mark.parametrize(
    ("status", "category"),
    [
        (0, ErrorCategory.NETWORK),
        (401, ErrorCategory.AUTHENTICATION),
        (403, ErrorCategory.AUTHORIZATION),
        (404, ErrorCategory.NOT_FOUND),
        (409, ErrorCategory.CONFLICT),
        (422, ErrorCategory.VALIDATION),
        (500, ErrorCategory.SERVER),
        (502, ErrorCategory.SERVER),
        (503, ErrorCategory.SERVER),
        (504, ErrorCategory.SERVER),
    ],
)
def test_classify_maps_known_status_codes(status: int, category: ErrorCategory) -> None:
    assert classify(ApiError("failed", status)) is category


@pytest.mark.parametrize("status", [400, 418, 429, 501, 599, -1])
def test_classify_unmapped_status_is_unknown(status: int) -> None:
    assert classify(ApiError("failed", status)) is ErrorCategory.UNKNOWN


def test_classify_uses_status_not_error_type() -> None:
    assert classify(NetworkError()) is ErrorCategory.NETWORK
    assert classify(ServerError(status_code=503)) is ErrorCategory.SERVER
    # 400 has a concrete subclass but no category entry.
    assert classify(BadRequestError()) is ErrorCategory.UNKNOWN


def test_classify_is_pure() -> None:
    error = ApiError("failed", 409, "DUPLICATE_ENTRY")
    assert classify(error) is classify(error)
