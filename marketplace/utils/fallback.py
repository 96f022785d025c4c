"""Ordered fallback chains expressed as data.

Each tier is an async callable returning a :class:`TierResult`. The chain runs
the tiers in order and stops at the first success, or at a failure flagged as
``final``. Tiers never raise for expected failures; they describe them.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TierResult(Generic[T]):
    """Outcome of one tier attempt."""

    tier: str
    value: T | None = None
    ok: bool = False
    reason: str | None = None
    final: bool = False

    @classmethod
    def success(cls, tier: str, value: T) -> "TierResult[T]":
        return cls(tier=tier, value=value, ok=True)

    @classmethod
    def failure(
        cls, tier: str, reason: str, *, final: bool = False
    ) -> "TierResult[T]":
        return cls(tier=tier, ok=False, reason=reason, final=final)


@dataclass(frozen=True)
class Tier(Generic[T]):
    """A named attempt in a fallback chain."""

    name: str
    attempt: Callable[[], Awaitable[TierResult[T]]]


async def first_success(tiers: Sequence[Tier[T]]) -> TierResult[T]:
    """Run ``tiers`` in order and return the first successful result.

    When every tier fails, or a tier reports a final failure, that failure is
    returned so the caller can decide what an exhausted chain means.
    """

    if not tiers:
        raise ValueError("At least one tier is required")

    attempts: list[TierResult[T]] = []
    for tier in tiers:
        result = await tier.attempt()
        attempts.append(result)
        if result.ok:
            if len(attempts) > 1:
                logger.info(
                    "Fallback chain resolved by tier '%s' after %d failed attempt(s)",
                    result.tier,
                    len(attempts) - 1,
                )
            return result
        logger.warning("Tier '%s' failed: %s", result.tier, result.reason)
        if result.final:
            return result
    return attempts[-1]


__all__ = [
    "Tier",
    "TierResult",
    "first_success",
]
