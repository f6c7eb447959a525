"""Stage booking entity: a committed slot on a stage."""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

from ..value_objects.enums import BookingStatus
from ..value_objects.time_window import TimeInterval


class StageBooking(BaseModel):
    """
    A [start, end) interval assigned to a job at a stage.

    Start and end are timezone-aware UTC instants; local business time is only
    used while searching for the slot.
    """

    id: UUID = Field(default_factory=uuid4)
    job_id: UUID
    stage_id: UUID
    start_time: datetime
    end_time: datetime
    duration_minutes: int = Field(gt=0)
    status: BookingStatus = BookingStatus.PENDING

    @model_validator(mode="after")
    def _check_interval(self) -> "StageBooking":
        if self.start_time.tzinfo is None or self.end_time.tzinfo is None:
            raise ValueError("Booking times must be timezone-aware")
        if self.end_time <= self.start_time:
            raise ValueError("Booking end must be after start")
        span = int((self.end_time - self.start_time).total_seconds() // 60)
        if span != self.duration_minutes:
            raise ValueError(
                f"Booking duration {self.duration_minutes} does not match "
                f"interval length {span}"
            )
        return self

    @classmethod
    def create(
        cls,
        job_id: UUID,
        stage_id: UUID,
        start_time: datetime,
        duration_minutes: int,
        status: BookingStatus = BookingStatus.PENDING,
    ) -> "StageBooking":
        """Create a booking from an absolute start and a duration."""
        start_utc = start_time.astimezone(timezone.utc)
        return cls(
            job_id=job_id,
            stage_id=stage_id,
            start_time=start_utc,
            end_time=start_utc + timedelta(minutes=duration_minutes),
            duration_minutes=duration_minutes,
            status=status,
        )

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)

    @property
    def duration_hours(self) -> float:
        return self.duration_minutes / 60

    @property
    def is_open(self) -> bool:
        return self.status.is_open
