"""Per-category retry policies and jittered exponential backoff."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .types import ErrorCategory, require_every_category

# Upper bound of the additive jitter, in milliseconds.
JITTER_MS = 1000


@dataclass(frozen=True)
class RetryPolicy:
    """Retry rule set for one error category."""

    eligible: bool
    max_attempts: int = 0
    base_delay_ms: int = 0
    max_delay_ms: int = 0

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be >= 0")

    @property
    def effective_attempts(self) -> int:
        """Attempt bound honoring eligibility; ineligible policies allow none."""
        return self.max_attempts if self.eligible else 0


_NO_RETRY = RetryPolicy(eligible=False)

DEFAULT_POLICIES: Mapping[ErrorCategory, RetryPolicy] = require_every_category(
    {
        ErrorCategory.NETWORK: RetryPolicy(True, max_attempts=3, base_delay_ms=1000, max_delay_ms=10000),
        ErrorCategory.SERVER: RetryPolicy(True, max_attempts=2, base_delay_ms=2000, max_delay_ms=15000),
        ErrorCategory.UNKNOWN: RetryPolicy(True, max_attempts=1, base_delay_ms=1000, max_delay_ms=5000),
        ErrorCategory.AUTHENTICATION: _NO_RETRY,
        ErrorCategory.AUTHORIZATION: _NO_RETRY,
        ErrorCategory.VALIDATION: _NO_RETRY,
        ErrorCategory.NOT_FOUND: _NO_RETRY,
        ErrorCategory.CONFLICT: _NO_RETRY,
    },
    "DEFAULT_POLICIES",
)


def policy_for(category: ErrorCategory) -> RetryPolicy:
    """Default policy of ``category``."""
    return DEFAULT_POLICIES[category]


class PolicyTable:
    """Category to policy lookup with optional per-category overrides."""

    def __init__(self, policies: Optional[Mapping[ErrorCategory, RetryPolicy]] = None):
        merged: Dict[ErrorCategory, RetryPolicy] = dict(DEFAULT_POLICIES)
        if policies:
            merged.update(policies)
        self._policies = require_every_category(merged, "PolicyTable")

    @classmethod
    def with_overrides(cls, overrides: Mapping[ErrorCategory, Mapping[str, Any]]) -> "PolicyTable":
        """Build a table where each override patches the default policy's fields."""
        patched = {
            category: replace(DEFAULT_POLICIES[category], **dict(fields))
            for category, fields in overrides.items()
        }
        return cls(patched)

    def policy_for(self, category: ErrorCategory) -> RetryPolicy:
        return self._policies[category]

    def items(self) -> List[Tuple[ErrorCategory, RetryPolicy]]:
        return [(category, self._policies[category]) for category in ErrorCategory]


def backoff_delay_ms(
    attempt_index: int,
    policy: RetryPolicy,
    rng: Optional[random.Random] = None,
) -> int:
    """Exponential delay for ``attempt_index`` plus 0-1000 ms of jitter.

    The jitter is added after clamping to ``max_delay_ms``, so the result can
    exceed it by up to ``JITTER_MS``.
    """
    if attempt_index < 0:
        raise ValueError("attempt_index must be >= 0")
    base = min(policy.base_delay_ms * (2 ** attempt_index), policy.max_delay_ms)
    jitter = (rng or random).randint(0, JITTER_MS)
    return base + jitter
