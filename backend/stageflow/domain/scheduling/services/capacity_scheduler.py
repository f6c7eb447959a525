"""
Capacity Scheduler

Schedules batches of (job, stage, duration) requests. Requests are placed one at
a time in priority order against a shared allocation overlay, so every placement
sees the reservations made before it. Partial success is normal: a request that
cannot be placed is reported and the batch carries on.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from uuid import UUID, uuid4

from ....core.config import SchedulerConfig
from ....core.observability import get_logger, monitor_performance
from ...shared.exceptions import (
    BatchPersistenceError,
    DomainError,
    ErrorType,
    InvalidStageConfigurationError,
    NoCapacityFoundError,
    PersistenceFailureError,
    ValidationError,
)
from ..entities.booking import StageBooking
from ..repositories.scheduling_repository import SchedulingRepository
from .allocation_overlay import AllocationOverlay
from .capacity_profiles import CapacityProfileResolver, StageCapacity
from .slot_finder import SlotFinder, SlotSearchResult
from .time_converter import TimeConverter

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ScheduleRequest:
    """Work to place on one stage for one job. Lower priority values go first."""

    job_id: UUID
    stage_id: UUID
    duration_minutes: int
    earliest_start: datetime | None = None
    priority: int = 0


@dataclass(frozen=True)
class ScheduledSlot:
    """A placed request. Times are absolute UTC instants."""

    job_id: UUID
    stage_id: UUID
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    local_start: datetime
    local_end: datetime
    booking_id: UUID = field(default_factory=uuid4)

    def to_booking(self) -> StageBooking:
        return StageBooking(
            id=self.booking_id,
            job_id=self.job_id,
            stage_id=self.stage_id,
            start_time=self.start_time,
            end_time=self.end_time,
            duration_minutes=self.duration_minutes,
        )


@dataclass(frozen=True)
class SchedulingFailure:
    """A request that could not be placed, with the reason."""

    request: ScheduleRequest
    error: DomainError

    @property
    def error_type(self) -> ErrorType:
        return self.error.error_type

    @property
    def message(self) -> str:
        return self.error.message


@dataclass
class CapacityUsage:
    """Minutes used on a stage and date after the batch was placed."""

    stage_id: UUID
    capacity_date: date
    used_minutes: int
    total_minutes: int

    @property
    def available_minutes(self) -> int:
        return max(0, self.total_minutes - self.used_minutes)

    @property
    def utilization(self) -> float:
        if self.total_minutes <= 0:
            return 0.0
        return self.used_minutes / self.total_minutes


@dataclass
class BatchScheduleResult:
    scheduled: list[ScheduledSlot] = field(default_factory=list)
    failures: list[SchedulingFailure] = field(default_factory=list)
    capacity_analysis: list[CapacityUsage] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.failures

    def bookings(self) -> list[StageBooking]:
        return [slot.to_booking() for slot in self.scheduled]

    def bookings_by_job(self) -> dict[UUID, list[StageBooking]]:
        """Bookings grouped per job, in placement order."""
        grouped: dict[UUID, list[StageBooking]] = {}
        for slot in self.scheduled:
            grouped.setdefault(slot.job_id, []).append(slot.to_booking())
        return grouped


class CapacityScheduler:
    """
    Places batches of requests on stages without double-booking capacity.

    Each schedule_batch call owns its own AllocationOverlay; nothing is shared
    between calls. Persistence is a separate step so callers can inspect or
    discard the in-memory result first.
    """

    def __init__(
        self,
        repository: SchedulingRepository,
        slot_finder: SlotFinder,
        resolver: CapacityProfileResolver,
        converter: TimeConverter,
        config: SchedulerConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._slot_finder = slot_finder
        self._resolver = resolver
        self._converter = converter
        self._config = config
        self._clock = clock

    @monitor_performance("schedule_batch")
    async def schedule_batch(
        self,
        requests: Sequence[ScheduleRequest],
        horizon_days: int | None = None,
    ) -> BatchScheduleResult:
        """
        Schedule a batch of requests.

        Requests are stable-sorted by (priority, earliest start). A request
        without an earliest start, or with one in the past, starts searching
        from now.

        Args:
            requests: Requests to place
            horizon_days: Working days each search may examine

        Returns:
            BatchScheduleResult with placements, per-request failures and the
            resulting capacity usage per stage and date
        """
        horizon = self._config.horizon_days if horizon_days is None else horizon_days
        now = self._clock()
        overlay = AllocationOverlay()
        result = BatchScheduleResult()
        capacities: dict[UUID, StageCapacity] = {}
        blocked: dict[UUID, InvalidStageConfigurationError] = {}
        usage: dict[tuple[UUID, date], CapacityUsage] = {}

        def earliest_for(request: ScheduleRequest) -> datetime:
            if request.earliest_start is None:
                return now
            self._converter.to_local(request.earliest_start)  # rejects naive values
            return max(request.earliest_start, now)

        prepared: list[tuple[ScheduleRequest, datetime]] = []
        for request in requests:
            try:
                prepared.append((request, earliest_for(request)))
            except ValidationError as e:
                result.failures.append(SchedulingFailure(request, e))

        prepared.sort(key=lambda item: (item[0].priority, item[1]))

        logger.info(
            "Scheduling batch",
            request_count=len(requests),
            horizon_days=horizon,
        )

        for request, earliest in prepared:
            if request.stage_id in blocked:
                result.failures.append(
                    SchedulingFailure(request, blocked[request.stage_id])
                )
                continue

            try:
                if request.stage_id not in capacities:
                    capacities[request.stage_id] = await self._resolver.resolve(
                        request.stage_id
                    )
                placement = await self._slot_finder.search(
                    request.stage_id,
                    request.duration_minutes,
                    earliest,
                    horizon_days=horizon,
                    overlay=overlay,
                    capacity=capacities[request.stage_id],
                )
            except InvalidStageConfigurationError as e:
                logger.warning(
                    "Stage misconfigured, blocking its requests",
                    stage_id=str(request.stage_id),
                    reason=e.reason,
                )
                blocked[request.stage_id] = e
                result.failures.append(SchedulingFailure(request, e))
                continue
            except (ValidationError, PersistenceFailureError) as e:
                logger.warning(
                    "Request could not be scheduled",
                    job_id=str(request.job_id),
                    stage_id=str(request.stage_id),
                    error=e.message,
                )
                result.failures.append(SchedulingFailure(request, e))
                continue

            if placement is None:
                error = NoCapacityFoundError(
                    request.stage_id, request.duration_minutes, horizon
                )
                logger.warning(
                    "No capacity found",
                    job_id=str(request.job_id),
                    stage_id=str(request.stage_id),
                    duration_minutes=request.duration_minutes,
                    horizon_days=horizon,
                )
                result.failures.append(SchedulingFailure(request, error))
                continue

            result.scheduled.append(self._commit(request, placement, overlay))
            usage[(request.stage_id, placement.capacity_date)] = CapacityUsage(
                stage_id=request.stage_id,
                capacity_date=placement.capacity_date,
                used_minutes=placement.booked_minutes + request.duration_minutes,
                total_minutes=placement.capacity_minutes,
            )

        result.capacity_analysis = sorted(
            usage.values(), key=lambda u: (str(u.stage_id), u.capacity_date)
        )
        logger.info(
            "Batch scheduled",
            scheduled=len(result.scheduled),
            failed=len(result.failures),
            reservations=len(overlay),
        )
        return result

    async def persist(self, result: BatchScheduleResult) -> list[StageBooking]:
        """
        Persist a batch's bookings, one atomic write per job.

        Every job is attempted even when an earlier one fails.

        Returns:
            Bookings that were stored

        Raises:
            BatchPersistenceError: If any job failed; carries the full result
                and the failed job ids
        """
        stored: list[StageBooking] = []
        failed: dict[UUID, str] = {}

        for job_id, bookings in result.bookings_by_job().items():
            try:
                stored.extend(await self._repository.persist_bookings(bookings))
            except PersistenceFailureError as e:
                logger.error(
                    "Failed to persist job bookings",
                    job_id=str(job_id),
                    booking_count=len(bookings),
                    error=e.message,
                )
                failed[job_id] = e.message

        if failed:
            raise BatchPersistenceError(result, failed)
        return stored

    async def schedule_and_persist(
        self,
        requests: Sequence[ScheduleRequest],
        horizon_days: int | None = None,
    ) -> BatchScheduleResult:
        """Schedule a batch and persist whatever was placed."""
        result = await self.schedule_batch(requests, horizon_days=horizon_days)
        await self.persist(result)
        return result

    def _commit(
        self,
        request: ScheduleRequest,
        placement: SlotSearchResult,
        overlay: AllocationOverlay,
    ) -> ScheduledSlot:
        overlay.reserve(request.stage_id, request.job_id, placement.interval)
        return ScheduledSlot(
            job_id=request.job_id,
            stage_id=request.stage_id,
            start_time=self._converter.to_absolute(placement.start),
            end_time=self._converter.to_absolute(placement.end),
            duration_minutes=request.duration_minutes,
            local_start=placement.start,
            local_end=placement.end,
        )
