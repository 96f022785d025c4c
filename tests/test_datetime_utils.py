"""Tests for timestamp helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from marketplace.utils import timestamp_sort_key, to_utc_isoformat


def test_sort_key_distinguishes_adjacent_microseconds() -> None:
    late = datetime(2262, 1, 1, 0, 0, 0, 1, tzinfo=timezone.utc)
    earlier = late - timedelta(microseconds=1)

    assert timestamp_sort_key(late) > timestamp_sort_key(earlier)
    assert sorted([late, earlier], key=timestamp_sort_key, reverse=True) == [late, earlier]


def test_sort_key_normalises_inputs() -> None:
    aware = datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
    naive = aware.replace(tzinfo=None)
    offset = aware.astimezone(timezone(timedelta(hours=-6)))

    assert timestamp_sort_key(naive) == aware
    assert timestamp_sort_key(offset) == aware
    assert timestamp_sort_key(to_utc_isoformat(aware)) == aware


def test_unknown_values_sort_as_epoch() -> None:
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)

    assert timestamp_sort_key(None) == epoch
    assert timestamp_sort_key("not a date") == epoch
    assert timestamp_sort_key(True) == epoch
    assert timestamp_sort_key(0) == epoch
