"""
In-memory Scheduling Repository

Dict-backed implementation of SchedulingRepository for tests and local runs.
Seeding helpers are synchronous; the repository interface stays async.
"""

from datetime import date, datetime
from uuid import UUID

from ...domain.scheduling.entities.booking import StageBooking
from ...domain.scheduling.entities.stage import CapacityProfile, Stage
from ...domain.scheduling.entities.stage_instance import StageInstance
from ...domain.scheduling.repositories.scheduling_repository import (
    SchedulingRepository,
)
from ...domain.scheduling.value_objects.enums import StageInstanceStatus


class InMemorySchedulingRepository(SchedulingRepository):
    def __init__(self) -> None:
        self._stages: dict[UUID, Stage] = {}
        self._profiles: dict[UUID, CapacityProfile] = {}
        self._bookings: dict[UUID, StageBooking] = {}
        self._instances: dict[UUID, StageInstance] = {}
        self._holidays: set[date] = set()

    # Seeding

    def add_stage(self, stage: Stage) -> Stage:
        self._stages[stage.id] = stage
        return stage

    def set_capacity_profile(self, profile: CapacityProfile) -> CapacityProfile:
        self._profiles[profile.stage_id] = profile
        return profile

    def add_booking(self, booking: StageBooking) -> StageBooking:
        self._bookings[booking.id] = booking
        return booking

    def add_stage_instance(self, instance: StageInstance) -> StageInstance:
        self._instances[instance.id] = instance
        return instance

    def add_holiday(self, holiday: date) -> None:
        self._holidays.add(holiday)

    @property
    def bookings(self) -> list[StageBooking]:
        return sorted(self._bookings.values(), key=lambda b: b.start_time)

    # SchedulingRepository

    async def get_stage(self, stage_id: UUID) -> Stage | None:
        return self._stages.get(stage_id)

    async def list_stages(self, active_only: bool = True) -> list[Stage]:
        stages = [s for s in self._stages.values() if s.is_active or not active_only]
        return sorted(stages, key=lambda s: s.order_index)

    async def get_capacity_profile(self, stage_id: UUID) -> CapacityProfile | None:
        return self._profiles.get(stage_id)

    async def list_bookings(
        self, stage_id: UUID, start: datetime, end: datetime
    ) -> list[StageBooking]:
        return [
            b
            for b in self.bookings
            if b.stage_id == stage_id and b.start_time < end and start < b.end_time
        ]

    async def list_open_bookings(self, stage_id: UUID) -> list[StageBooking]:
        return [b for b in self.bookings if b.stage_id == stage_id and b.is_open]

    async def list_stage_instances_for_job(self, job_id: UUID) -> list[StageInstance]:
        instances = [
            i
            for i in self._instances.values()
            if i.job_id == job_id and not i.is_completed
        ]
        return sorted(instances, key=lambda i: i.stage_order)

    async def persist_bookings(self, bookings: list[StageBooking]) -> list[StageBooking]:
        for booking in bookings:
            self._bookings[booking.id] = booking
        return list(bookings)

    async def list_active_stages_overdue(
        self, as_of: datetime, default_duration_minutes: int = 60
    ) -> list[StageInstance]:
        overdue = []
        for instance in self._instances.values():
            if instance.status != StageInstanceStatus.ACTIVE:
                continue
            expected = instance.expected_completion(default_duration_minutes)
            if expected is not None and expected < as_of:
                overdue.append(instance)
        return sorted(overdue, key=lambda i: i.started_at)

    async def list_holidays(self) -> list[date]:
        return sorted(self._holidays)
