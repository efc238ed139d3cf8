"""
Half-open time intervals.

A TimeInterval covers ``[start, end)``: the start instant is included and the
end instant is not, so a booking ending at 11:00 and one starting at 11:00 do
not overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from facility_booking.errors import InvalidInterval
from facility_booking.utils.datetime import ensure_utc


@dataclass(frozen=True)
class TimeInterval:
    """
    A validated ``[start, end)`` range in UTC.

    Raises:
        InvalidInterval: If either bound is not a datetime or end <= start

    Example:
        >>> a = TimeInterval(datetime(2025, 1, 1, 10), datetime(2025, 1, 1, 11))
        >>> b = TimeInterval(datetime(2025, 1, 1, 11), datetime(2025, 1, 1, 12))
        >>> a.overlaps(b)
        False
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.start, datetime) or not isinstance(self.end, datetime):
            raise InvalidInterval("Interval bounds must be datetimes")

        start = ensure_utc(self.start)
        end = ensure_utc(self.end)
        if end <= start:
            raise InvalidInterval(
                "Interval end must be after its start",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )

        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def overlaps(self, other: TimeInterval) -> bool:
        return overlaps(self, other)

    def extend(self, extra: timedelta) -> TimeInterval:
        """Return a copy with the end pushed out by ``extra`` (must be positive)."""
        if extra <= timedelta(0):
            raise InvalidInterval("Extension must be a positive duration")
        return TimeInterval(self.start, self.end + extra)


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Standard half-open overlap test; touching intervals do not overlap."""
    return a.start < b.end and b.start < a.end
