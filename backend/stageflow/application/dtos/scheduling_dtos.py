"""
Scheduling DTOs

Request and response models exchanged with the HTTP wrapper. Instants are
timezone-aware; naive datetimes are rejected at the boundary.
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, Field

from stageflow.domain.scheduling.read_models import (
    DueDateEstimate,
    DueDateWarning,
    NewWorkItem,
)
from stageflow.domain.scheduling.services import (
    BatchScheduleResult,
    ScheduleRequest,
    SlotSearchResult,
)
from stageflow.domain.scheduling.services.time_converter import TimeConverter


class ScheduleRequestItem(BaseModel):
    job_id: UUID
    stage_id: UUID
    duration_minutes: int = Field(gt=0)
    earliest_start: AwareDatetime | None = None
    priority: int = 0

    def to_domain(self) -> ScheduleRequest:
        return ScheduleRequest(
            job_id=self.job_id,
            stage_id=self.stage_id,
            duration_minutes=self.duration_minutes,
            earliest_start=self.earliest_start,
            priority=self.priority,
        )


class BatchScheduleRequest(BaseModel):
    requests: list[ScheduleRequestItem] = Field(min_length=1)
    horizon_days: int | None = Field(default=None, gt=0)
    commit: bool = False


class ScheduledSlotResponse(BaseModel):
    booking_id: UUID
    job_id: UUID
    stage_id: UUID
    start_time: datetime
    end_time: datetime
    local_start: datetime
    local_end: datetime
    duration_minutes: int


class SchedulingFailureResponse(BaseModel):
    job_id: UUID
    stage_id: UUID
    duration_minutes: int
    error_type: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class CapacityUsageResponse(BaseModel):
    stage_id: UUID
    capacity_date: date
    used_minutes: int
    available_minutes: int
    total_minutes: int


class BatchScheduleResponse(BaseModel):
    scheduled: list[ScheduledSlotResponse] = Field(default_factory=list)
    failures: list[SchedulingFailureResponse] = Field(default_factory=list)
    capacity_analysis: list[CapacityUsageResponse] = Field(default_factory=list)
    committed: bool = False

    @classmethod
    def from_result(
        cls, result: BatchScheduleResult, committed: bool = False
    ) -> "BatchScheduleResponse":
        return cls(
            scheduled=[
                ScheduledSlotResponse(
                    booking_id=slot.booking_id,
                    job_id=slot.job_id,
                    stage_id=slot.stage_id,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    local_start=slot.local_start,
                    local_end=slot.local_end,
                    duration_minutes=slot.duration_minutes,
                )
                for slot in result.scheduled
            ],
            failures=[
                SchedulingFailureResponse(
                    job_id=failure.request.job_id,
                    stage_id=failure.request.stage_id,
                    duration_minutes=failure.request.duration_minutes,
                    error_type=failure.error_type.value,
                    message=failure.message,
                    details=failure.error.details,
                )
                for failure in result.failures
            ],
            capacity_analysis=[
                CapacityUsageResponse(
                    stage_id=usage.stage_id,
                    capacity_date=usage.capacity_date,
                    used_minutes=usage.used_minutes,
                    available_minutes=usage.available_minutes,
                    total_minutes=usage.total_minutes,
                )
                for usage in result.capacity_analysis
            ],
            committed=committed,
        )


class SlotSearchRequest(BaseModel):
    stage_id: UUID
    duration_minutes: int = Field(gt=0)
    earliest_start: AwareDatetime
    horizon_days: int | None = Field(default=None, gt=0)


class SlotSearchResponse(BaseModel):
    stage_id: UUID
    found: bool
    start_time: datetime | None = None
    end_time: datetime | None = None
    local_start: datetime | None = None
    local_end: datetime | None = None
    capacity_date: date | None = None
    booked_minutes: int | None = None
    capacity_minutes: int | None = None

    @classmethod
    def from_result(
        cls,
        stage_id: UUID,
        result: SlotSearchResult | None,
        converter: TimeConverter,
    ) -> "SlotSearchResponse":
        if result is None:
            return cls(stage_id=stage_id, found=False)
        return cls(
            stage_id=stage_id,
            found=True,
            start_time=converter.to_absolute(result.start),
            end_time=converter.to_absolute(result.end),
            local_start=result.start,
            local_end=result.end,
            capacity_date=result.capacity_date,
            booked_minutes=result.booked_minutes,
            capacity_minutes=result.capacity_minutes,
        )


class CapacityImpactRequest(BaseModel):
    new_work: list[NewWorkItem] = Field(min_length=1)


class DueDateResponse(BaseModel):
    job_id: UUID
    estimate: DueDateEstimate | None = None
    warning: DueDateWarning | None = None
