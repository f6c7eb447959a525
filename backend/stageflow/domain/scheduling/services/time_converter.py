"""
Time Converter

The single conversion boundary between absolute instants (timezone-aware UTC)
and local business time. All slot arithmetic happens on local, zone-aware
datetimes; only the results are converted back to absolute time for storage.
"""

from datetime import date, datetime, time, timedelta, timezone

from ....core.config import SchedulerConfig
from ...shared.exceptions import ValidationError
from ..value_objects.business_calendar import BusinessHours, WorkingCalendar
from ..value_objects.time_window import TimeInterval


class TimeConverter:
    """
    Converts between absolute and local business time and answers
    working-calendar questions in local time.
    """

    def __init__(self, config: SchedulerConfig) -> None:
        self._zone = config.zone
        self._calendar = config.calendar
        self._default_hours = config.working_hours

    @property
    def calendar(self) -> WorkingCalendar:
        return self._calendar

    @property
    def default_hours(self) -> BusinessHours:
        return self._default_hours

    def to_local(self, absolute: datetime) -> datetime:
        """
        Convert an absolute instant to local business time.

        Args:
            absolute: Timezone-aware instant

        Returns:
            The same instant expressed in the business timezone

        Raises:
            ValidationError: If the datetime is naive
        """
        if absolute.tzinfo is None or absolute.utcoffset() is None:
            raise ValidationError(
                "absolute_time",
                absolute,
                "Absolute times must be timezone-aware",
                "NAIVE_DATETIME",
            )
        return absolute.astimezone(self._zone)

    def to_absolute(self, local: datetime) -> datetime:
        """
        Convert local business time to an absolute UTC instant.

        Naive values are read as wall-clock time in the business timezone.
        """
        if local.tzinfo is None:
            local = local.replace(tzinfo=self._zone)
        return local.astimezone(timezone.utc)

    def is_working_day(self, local_date: date) -> bool:
        return self._calendar.is_working_day(local_date)

    def local_datetime(self, local_date: date, local_time: time) -> datetime:
        return datetime.combine(local_date, local_time, tzinfo=self._zone)

    def working_window(
        self, local_date: date, hours: BusinessHours | None = None
    ) -> TimeInterval:
        """Local [start, end) working window of a date."""
        hours = hours or self._default_hours
        return TimeInterval(
            self.local_datetime(local_date, hours.start_time),
            self.local_datetime(local_date, hours.end_time),
        )

    def next_working_day_start(
        self, local: datetime, hours: BusinessHours | None = None
    ) -> datetime:
        """Window start of the first working day after the local date."""
        hours = hours or self._default_hours
        next_day = self._calendar.next_working_day(local.date())
        return self.local_datetime(next_day, hours.start_time)

    def clamp_to_working_window(
        self, local: datetime, hours: BusinessHours | None = None
    ) -> datetime:
        """
        Move a local time into the nearest working window at or after it.

        Before the window start returns that day's start; at or after the
        window end (or on a non-working day) returns the next working day's start.
        """
        hours = hours or self._default_hours
        local = self._as_local(local)

        if not self.is_working_day(local.date()):
            return self.next_working_day_start(local, hours)

        if hours.is_within_hours(local.time()):
            return local
        if local.time() < hours.start_time:
            return self.local_datetime(local.date(), hours.start_time)
        return self.next_working_day_start(local, hours)

    def advance_working_minutes(
        self,
        local_start: datetime,
        minutes: int,
        hours: BusinessHours | None = None,
    ) -> datetime:
        """
        Walk forward through working windows until ``minutes`` of work are consumed.

        Args:
            local_start: Where the work begins (clamped into a working window)
            minutes: Working minutes to consume
            hours: Working hours of the stage

        Returns:
            Local completion time
        """
        if minutes < 0:
            raise ValidationError("minutes", minutes, "Cannot advance by negative minutes")

        hours = hours or self._default_hours
        cursor = self.clamp_to_working_window(local_start, hours)
        remaining = minutes

        while True:
            window_end = self.working_window(cursor.date(), hours).end
            available = int((window_end - cursor).total_seconds() // 60)
            if remaining <= available:
                return cursor + timedelta(minutes=remaining)
            remaining -= available
            cursor = self.next_working_day_start(cursor, hours)

    def _as_local(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self._zone)
        return value.astimezone(self._zone)
