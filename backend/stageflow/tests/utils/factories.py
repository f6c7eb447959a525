"""
Test data factories for stage scheduling.

All local times are SAST (Africa/Johannesburg, UTC+2, no DST).
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

from stageflow.domain.scheduling.entities import (
    CapacityProfile,
    Stage,
    StageBooking,
    StageInstance,
)
from stageflow.domain.scheduling.value_objects.enums import (
    BookingStatus,
    StageInstanceStatus,
)
from stageflow.infrastructure.persistence import InMemorySchedulingRepository

SAST = ZoneInfo("Africa/Johannesburg")

# Friday 15 August 2025 06:00 SAST, before the working window opens
NOW = datetime(2025, 8, 15, 6, 0, tzinfo=SAST)


def sast(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=SAST)


def utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


def fixed_clock(now: datetime = NOW):
    return lambda: utc(now)


class StageFactory:
    """Seeds stages (and optional capacity profiles) into a repository."""

    @staticmethod
    def create(
        repository: InMemorySchedulingRepository,
        name: str = "Printing",
        capacity_hours: float | None = 8.0,
        efficiency: float = 1.0,
        order_index: int = 0,
        is_bottleneck: bool = False,
        with_profile: bool = True,
        **kwargs,
    ) -> Stage:
        stage = Stage(
            name=name,
            order_index=order_index,
            daily_capacity_hours=None if with_profile else capacity_hours,
            **kwargs,
        )
        repository.add_stage(stage)
        if with_profile and capacity_hours is not None:
            repository.set_capacity_profile(
                CapacityProfile(
                    stage_id=stage.id,
                    daily_capacity_hours=capacity_hours,
                    efficiency_factor=efficiency,
                    is_bottleneck=is_bottleneck,
                )
            )
        return stage


class BookingFactory:
    @staticmethod
    def create(
        repository: InMemorySchedulingRepository,
        stage_id: UUID,
        local_start: datetime,
        minutes: int,
        status: BookingStatus = BookingStatus.PENDING,
        job_id: UUID | None = None,
    ) -> StageBooking:
        booking = StageBooking(
            job_id=job_id or uuid4(),
            stage_id=stage_id,
            start_time=utc(local_start),
            end_time=utc(local_start + timedelta(minutes=minutes)),
            duration_minutes=minutes,
            status=status,
        )
        return repository.add_booking(booking)


class StageInstanceFactory:
    @staticmethod
    def create(
        repository: InMemorySchedulingRepository,
        job_id: UUID,
        stage: Stage,
        stage_order: int,
        minutes: int | None = 60,
        status: StageInstanceStatus = StageInstanceStatus.PENDING,
        started_at: datetime | None = None,
    ) -> StageInstance:
        instance = StageInstance(
            job_id=job_id,
            stage_id=stage.id,
            stage_name=stage.name,
            stage_order=stage_order,
            estimated_duration_minutes=minutes,
            status=status,
            started_at=utc(started_at) if started_at else None,
        )
        return repository.add_stage_instance(instance)
