"""Enumerations for the stage scheduling domain."""

from enum import Enum


class BookingStatus(str, Enum):
    """Lifecycle of a committed stage booking."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"

    @property
    def is_open(self) -> bool:
        """Open bookings still consume queue capacity."""
        return self in (BookingStatus.PENDING, BookingStatus.ACTIVE)


class StageInstanceStatus(str, Enum):
    """Progress of a job through one of its stages."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class DueDateWarningLevel(str, Enum):
    """How far a projected completion runs past the promised due date."""

    GREEN = "green"
    AMBER = "amber"
    RED = "red"
    CRITICAL = "critical"
