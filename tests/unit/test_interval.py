"""
Unit tests for half-open time intervals.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from facility_booking.errors import InvalidInterval
from facility_booking.utils.interval import TimeInterval, overlaps

UTC = timezone.utc


def iv(start_hour: int, end_hour: int) -> TimeInterval:
    return TimeInterval(
        datetime(2025, 6, 1, start_hour, tzinfo=UTC), datetime(2025, 6, 1, end_hour, tzinfo=UTC)
    )


@pytest.mark.unit
def test_touching_intervals_do_not_overlap() -> None:
    assert not iv(10, 11).overlaps(iv(11, 12))
    assert not iv(11, 12).overlaps(iv(10, 11))


@pytest.mark.unit
@pytest.mark.parametrize(
    "a,b",
    [
        ((10, 12), (11, 13)),  # partial
        ((10, 14), (11, 12)),  # containment
        ((10, 12), (10, 12)),  # identical
    ],
)
def test_overlapping_intervals(a: tuple[int, int], b: tuple[int, int]) -> None:
    assert overlaps(iv(*a), iv(*b))
    assert overlaps(iv(*b), iv(*a))


@pytest.mark.unit
def test_disjoint_intervals() -> None:
    assert not overlaps(iv(8, 9), iv(10, 11))


@pytest.mark.unit
def test_end_before_or_equal_start_is_rejected() -> None:
    start = datetime(2025, 6, 1, 10, tzinfo=UTC)

    with pytest.raises(InvalidInterval):
        TimeInterval(start, start)
    with pytest.raises(InvalidInterval):
        TimeInterval(start, start - timedelta(minutes=1))


@pytest.mark.unit
def test_non_datetime_bounds_are_rejected() -> None:
    with pytest.raises(InvalidInterval):
        TimeInterval("2025-06-01T10:00:00", "2025-06-01T11:00:00")  # type: ignore[arg-type]


@pytest.mark.unit
def test_naive_bounds_are_treated_as_utc() -> None:
    interval = TimeInterval(datetime(2025, 6, 1, 10), datetime(2025, 6, 1, 11))

    assert interval.start.tzinfo is UTC
    assert interval.end - interval.start == timedelta(hours=1)


@pytest.mark.unit
def test_offset_bounds_are_converted_to_utc() -> None:
    yangon = timezone(timedelta(hours=6, minutes=30))
    interval = TimeInterval(
        datetime(2025, 6, 1, 16, 30, tzinfo=yangon), datetime(2025, 6, 1, 17, 30, tzinfo=yangon)
    )

    assert interval.start == datetime(2025, 6, 1, 10, tzinfo=UTC)


@pytest.mark.unit
def test_extend_moves_end_only() -> None:
    extended = iv(10, 11).extend(timedelta(minutes=30))

    assert extended.start == datetime(2025, 6, 1, 10, tzinfo=UTC)
    assert extended.end == datetime(2025, 6, 1, 11, 30, tzinfo=UTC)


@pytest.mark.unit
def test_extend_requires_positive_duration() -> None:
    with pytest.raises(InvalidInterval):
        iv(10, 11).extend(timedelta(0))
