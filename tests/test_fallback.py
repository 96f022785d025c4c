"""Tests for ordered fallback chains."""

from __future__ import annotations

import pytest

from marketplace.utils import Tier, TierResult, first_success

pytestmark = pytest.mark.anyio


def _tier(name: str, result: TierResult, calls: list[str]) -> Tier:
    async def attempt() -> TierResult:
        calls.append(name)
        return result

    return Tier(name, attempt)


async def test_stops_at_first_success() -> None:
    calls: list[str] = []
    result = await first_success(
        [
            _tier("a", TierResult.failure("a", "down"), calls),
            _tier("b", TierResult.success("b", 2), calls),
            _tier("c", TierResult.success("c", 3), calls),
        ]
    )

    assert (result.tier, result.value) == ("b", 2)
    assert calls == ["a", "b"]


async def test_final_failure_short_circuits() -> None:
    calls: list[str] = []
    result = await first_success(
        [
            _tier("a", TierResult.failure("a", "denied", final=True), calls),
            _tier("b", TierResult.success("b", 2), calls),
        ]
    )

    assert result.ok is False
    assert result.reason == "denied"
    assert calls == ["a"]


async def test_empty_chain_is_rejected() -> None:
    with pytest.raises(ValueError):
        await first_success([])
