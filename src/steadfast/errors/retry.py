"""Retry orchestration for asynchronous operations.

Attempts run strictly one after another. Between attempts the wait follows
the jittered exponential backoff of :mod:`steadfast.errors.policy`. An
optional ``asyncio.Event`` cancels the whole run, both while the operation
is in flight and while waiting.
"""

from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, Mapping, Optional, TypeVar

from ..util.log import Log
from .handler import ErrorHandler
from .policy import RetryPolicy, backoff_delay_ms
from .types import ErrorContext

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]

log = Log.create({"service": "errors.retry"})

# Ratio between the caller-supplied base delay and the delay cap.
MAX_DELAY_FACTOR = 10


class RetryCancelledError(Exception):
    """Raised when the cancel signal stops a retry run."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"retry cancelled after {attempts} attempt(s)")


class _Cancelled(Exception):
    pass


async def _until_cancelled(awaitable: Awaitable[T], cancel: Optional[asyncio.Event]) -> T:
    """Await ``awaitable`` unless ``cancel`` is set first."""
    if cancel is None:
        return await awaitable

    work = asyncio.ensure_future(awaitable)
    signal = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({work, signal}, return_when=asyncio.FIRST_COMPLETED)
        if work.done():
            return work.result()
        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        raise _Cancelled()
    finally:
        for task in (work, signal):
            if not task.done():
                task.cancel()


def _schedule(
    policy: RetryPolicy,
    max_attempts: Optional[int],
    base_delay_ms: Optional[int],
) -> RetryPolicy:
    """Backoff schedule for one failure, caller values overriding the policy."""
    limit = policy.max_attempts if max_attempts is None else max_attempts
    if base_delay_ms is None:
        return RetryPolicy(True, limit, policy.base_delay_ms, policy.max_delay_ms)
    return RetryPolicy(True, limit, base_delay_ms, base_delay_ms * MAX_DELAY_FACTOR)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    context: ErrorContext,
    max_attempts: Optional[int] = 3,
    base_delay_ms: Optional[int] = 1000,
    *,
    handler: Optional[ErrorHandler] = None,
    custom_messages: Optional[Mapping[str, str]] = None,
    cancel: Optional[asyncio.Event] = None,
    sleep: Optional[SleepFunc] = None,
    rng: Optional[random.Random] = None,
) -> T:
    """Run ``operation`` until it succeeds or its failure must surface.

    Attempt indexes run from 0 to ``max_attempts``. Every failure goes
    through :meth:`ErrorHandler.handle_error`; a non-retryable category or
    the last attempt re-raises the original exception. ``None`` for
    ``max_attempts`` or ``base_delay_ms`` takes that value from the failure
    category's policy instead.

    Raises:
        RetryCancelledError: ``cancel`` was set before the run finished.
    """
    handler = handler or ErrorHandler.current()
    pause = sleep or asyncio.sleep
    attempt = 0
    last_error: Optional[BaseException] = None

    while True:
        if cancel is not None and cancel.is_set():
            raise RetryCancelledError(attempt, last_error)

        try:
            return await _until_cancelled(operation(), cancel)
        except _Cancelled:
            raise RetryCancelledError(attempt + 1, last_error) from last_error
        except Exception as error:
            last_error = error
            attempt_context = context.with_data(attempt=attempt + 1, max_attempts=max_attempts)
            result = handler.handle_error(error, attempt_context, custom_messages)
            if not result.should_retry:
                raise

            schedule = _schedule(handler.policy_for(result.category), max_attempts, base_delay_ms)
            if attempt >= schedule.max_attempts:
                raise
            delay_ms = backoff_delay_ms(attempt, schedule, rng or handler.rng)

        log.debug(
            "retrying operation",
            {
                "operation": context.operation,
                "module": context.module,
                "attempt": attempt + 1,
                "delay_ms": delay_ms,
            },
        )
        try:
            await _until_cancelled(pause(delay_ms / 1000), cancel)
        except _Cancelled:
            raise RetryCancelledError(attempt + 1, last_error) from last_error
        attempt += 1
