"""
Time Interval Value Object

Represents a half-open [start, end) period. Used for working windows, booked
slots and the free gaps between them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TimeInterval:
    """Immutable half-open interval between two datetimes."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(
                f"Interval end {self.end.isoformat()} must be after start "
                f"{self.start.isoformat()}"
            )

    @property
    def duration_minutes(self) -> int:
        """Whole minutes covered by the interval."""
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: TimeInterval) -> bool:
        """Two [start, end) intervals overlap when each starts before the other ends."""
        return self.start < other.end and other.start < self.end

    def clip(self, lower: datetime, upper: datetime) -> TimeInterval | None:
        """
        Restrict the interval to [lower, upper).

        Returns:
            The clipped interval, or None when nothing remains
        """
        start = max(self.start, lower)
        end = min(self.end, upper)
        if end <= start:
            return None
        return TimeInterval(start, end)

    def __str__(self) -> str:
        return f"{self.start.isoformat()} - {self.end.isoformat()}"


def free_intervals(
    window: TimeInterval, booked: Iterable[TimeInterval]
) -> list[TimeInterval]:
    """
    Subtract booked intervals from a window.

    Booked intervals are clipped to the window and swept in start order; the
    gaps between them (and the window edges) are returned in order.

    Args:
        window: Working window to search
        booked: Already occupied intervals, in any order, possibly overlapping

    Returns:
        Free intervals inside the window, sorted by start
    """
    clipped = sorted(
        (
            piece
            for piece in (interval.clip(window.start, window.end) for interval in booked)
            if piece is not None
        ),
        key=lambda interval: interval.start,
    )

    gaps: list[TimeInterval] = []
    cursor = window.start
    for interval in clipped:
        if cursor < interval.start:
            gaps.append(TimeInterval(cursor, interval.start))
        cursor = max(cursor, interval.end)
    if cursor < window.end:
        gaps.append(TimeInterval(cursor, window.end))
    return gaps
