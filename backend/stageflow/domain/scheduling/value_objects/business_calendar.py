"""
Business Calendar Value Objects

Represents daily working hours and the working-day calendar (working weekdays
minus public holidays). Both are immutable; changing a calendar returns a new
instance.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date, time, timedelta

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass(frozen=True)
class BusinessHours:
    """
    Represents a stage's daily working window in local business time.
    Immutable value object; the window never spans midnight.
    """

    start_time: time
    end_time: time

    def __post_init__(self):
        """Validate business hours constraints."""
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")

    def is_within_hours(self, check_time: time) -> bool:
        """
        Check if a time falls inside the [start, end) window.

        Args:
            check_time: Time to check

        Returns:
            True if time is within business hours
        """
        return self.start_time <= check_time < self.end_time

    def duration_minutes(self) -> int:
        """
        Calculate duration of business hours in minutes.

        Returns:
            Duration in minutes
        """
        start_minutes = self.start_time.hour * 60 + self.start_time.minute
        end_minutes = self.end_time.hour * 60 + self.end_time.minute
        return end_minutes - start_minutes

    @classmethod
    def parse(cls, start: str, end: str) -> BusinessHours:
        """Build business hours from 'HH:MM' strings."""
        return cls(time.fromisoformat(start), time.fromisoformat(end))

    def __str__(self) -> str:
        """String representation."""
        return (
            f"{self.start_time.strftime('%H:%M')} - {self.end_time.strftime('%H:%M')}"
        )


@dataclass(frozen=True)
class WorkingCalendar:
    """
    Represents which calendar dates are working days.
    A date is a working day when its weekday is a working weekday and it is
    not a public holiday.
    """

    working_weekdays: frozenset[int] = frozenset({0, 1, 2, 3, 4})  # 0=Monday
    holidays: frozenset[date] = field(default_factory=frozenset)

    def __post_init__(self):
        """Validate calendar constraints."""
        if not self.working_weekdays:
            raise ValueError("A working calendar needs at least one working weekday")
        for weekday in self.working_weekdays:
            if not 0 <= weekday <= 6:
                raise ValueError(
                    f"Invalid weekday: {weekday}. Must be 0-6 (Monday=0, Sunday=6)"
                )

    @classmethod
    def standard_calendar(cls, holidays: Iterable[date] = ()) -> WorkingCalendar:
        """Monday to Friday calendar with optional public holidays."""
        return cls(frozenset({0, 1, 2, 3, 4}), frozenset(holidays))

    def is_working_day(self, target_date: date) -> bool:
        """
        Check if a date is a working day.

        Args:
            target_date: Date to check

        Returns:
            True if date is a working day
        """
        if target_date in self.holidays:
            return False
        return target_date.weekday() in self.working_weekdays

    def next_working_day(self, target_date: date) -> date:
        """First working day strictly after the given date."""
        candidate = target_date + timedelta(days=1)
        while not self.is_working_day(candidate):
            candidate += timedelta(days=1)
        return candidate

    def working_day_on_or_after(self, target_date: date) -> date:
        """The date itself when it is a working day, else the next working day."""
        if self.is_working_day(target_date):
            return target_date
        return self.next_working_day(target_date)

    def iter_working_days(self, start: date, count: int) -> Iterator[date]:
        """
        Yield up to ``count`` consecutive working days, starting on or after ``start``.

        Args:
            start: First candidate date
            count: Number of working days to yield
        """
        current = self.working_day_on_or_after(start)
        for _ in range(count):
            yield current
            current = self.next_working_day(current)

    def add_working_days(self, start: date, days: int) -> date:
        """
        Move forward a number of working days.

        Zero days returns the first working day on or after ``start``. A
        non-working start counts forward the same as the working day before it.
        """
        if days < 0:
            raise ValueError("Cannot add a negative number of working days")
        if days == 0:
            return self.working_day_on_or_after(start)
        current = start
        for _ in range(days):
            current = self.next_working_day(current)
        return current

    @property
    def working_days_per_week(self) -> int:
        return len(self.working_weekdays)

    def with_holidays(self, holidays: Iterable[date]) -> WorkingCalendar:
        """Create a new calendar with several holidays added."""
        return WorkingCalendar(self.working_weekdays, self.holidays | frozenset(holidays))

    def __str__(self) -> str:
        """String representation, e.g. 'Mon-Fri (2 holidays)'."""
        days = sorted(self.working_weekdays)
        if days == list(range(days[0], days[-1] + 1)) and len(days) > 1:
            result = f"{DAY_NAMES[days[0]]}-{DAY_NAMES[days[-1]]}"
        else:
            result = ",".join(DAY_NAMES[d] for d in days)

        if self.holidays:
            result += f" ({len(self.holidays)} holidays)"
        return result
