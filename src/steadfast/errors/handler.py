"""Top-level error handling entry point.

``ErrorHandler`` runs one failure through the pipeline: normalize, classify,
look up the retry policy, resolve the user message, then log and report as
the router decides. The logger is injected; the handler used by the
module-level :func:`handle_error` is bound per context with
:meth:`ErrorHandler.provide` / :meth:`ErrorHandler.restore`.
"""

from __future__ import annotations

import random
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from .api_error import ApiError
from .classify import classify
from .messages import resolve_message
from .normalize import Normalizer, normalize
from .policy import PolicyTable, RetryPolicy, backoff_delay_ms
from .reporting import (
    ErrorLogger,
    LogErrorLogger,
    build_report,
    log_level_for,
    should_log,
    should_report,
)
from .types import ErrorCategory, ErrorContext, HandlingResult

if TYPE_CHECKING:
    from ..core.config_schema import Config

_handler_var: ContextVar["ErrorHandler"] = ContextVar("_handler_var")


class ErrorHandler:
    """Turns raw failures into :class:`HandlingResult` records."""

    def __init__(
        self,
        logger: Optional[ErrorLogger] = None,
        *,
        policies: Optional[PolicyTable] = None,
        normalizer: Optional[Normalizer] = None,
        messages: Optional[Mapping[str, str]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.logger: ErrorLogger = logger if logger is not None else LogErrorLogger()
        self.policies = policies or PolicyTable()
        self.normalizer: Normalizer = normalizer or normalize
        self.messages: Dict[str, str] = dict(messages or {})
        self.rng = rng

    # -- ContextVar plumbing --

    @classmethod
    def current(cls) -> "ErrorHandler":
        try:
            return _handler_var.get()
        except LookupError:
            instance = cls()
            _handler_var.set(instance)
            return instance

    @classmethod
    def provide(cls, handler: "ErrorHandler") -> Token["ErrorHandler"]:
        return _handler_var.set(handler)

    @classmethod
    def restore(cls, token: Token["ErrorHandler"]) -> None:
        _handler_var.reset(token)

    # -- Construction from configuration --

    @classmethod
    def from_config(cls, config: "Config", logger: Optional[ErrorLogger] = None) -> "ErrorHandler":
        """Handler with the policy overrides and messages of ``config``."""
        overrides: Dict[ErrorCategory, Dict[str, Any]] = {
            category: override.model_dump(exclude_none=True)
            for category, override in config.retry.policies.items()
        }
        return cls(
            logger,
            policies=PolicyTable.with_overrides(overrides),
            messages=config.messages,
        )

    @classmethod
    async def load(cls, logger: Optional[ErrorLogger] = None) -> "ErrorHandler":
        """Handler built from the configuration of the current context."""
        from ..core.config import ConfigManager

        return cls.from_config(await ConfigManager.get(), logger)

    # -- Pipeline --

    def policy_for(self, category: ErrorCategory) -> RetryPolicy:
        return self.policies.policy_for(category)

    def evaluate(
        self,
        error: Any,
        custom_messages: Optional[Mapping[str, str]] = None,
    ) -> Tuple[ApiError, HandlingResult]:
        """Compute the handling result without logging or reporting."""
        api_error = self.normalizer(error)
        category = classify(api_error)
        policy = self.policy_for(category)

        should_retry = policy.eligible
        retry_delay_ms = backoff_delay_ms(0, policy, self.rng) if should_retry else None

        messages = {**self.messages, **(custom_messages or {})}
        result = HandlingResult(
            user_message=resolve_message(api_error, category, messages),
            should_retry=should_retry,
            retry_delay_ms=retry_delay_ms,
            should_log=should_log(api_error, category),
            severity=api_error.severity,
            category=category,
        )
        return api_error, result

    def handle_error(
        self,
        error: Any,
        context: ErrorContext,
        custom_messages: Optional[Mapping[str, str]] = None,
    ) -> HandlingResult:
        """Handle one failure: evaluate it, then log and report as required."""
        api_error, result = self.evaluate(error, custom_messages)

        if result.should_log:
            self.logger.log(log_level_for(result.severity), result.user_message, api_error, context)

        if should_report(api_error):
            report = build_report(
                api_error,
                result.category,
                result.user_message,
                result.should_retry,
                context,
            )
            self.logger.report(report)

        return result


def handle_error(
    error: Any,
    context: ErrorContext,
    custom_messages: Optional[Mapping[str, str]] = None,
) -> HandlingResult:
    """Handle ``error`` with the handler bound to the current context."""
    return ErrorHandler.current().handle_error(error, context, custom_messages)
