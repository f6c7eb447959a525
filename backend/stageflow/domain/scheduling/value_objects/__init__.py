"""Value objects for the scheduling domain."""

from .business_calendar import BusinessHours, WorkingCalendar
from .enums import BookingStatus, DueDateWarningLevel, StageInstanceStatus
from .time_window import TimeInterval, free_intervals

__all__ = [
    "BookingStatus",
    "BusinessHours",
    "DueDateWarningLevel",
    "StageInstanceStatus",
    "TimeInterval",
    "WorkingCalendar",
    "free_intervals",
]
