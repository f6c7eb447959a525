"""
Slot Finder

Finds the earliest contiguous interval on a stage that fits within the stage's
working window and remaining daily capacity. A slot is always one atomic
interval on one working day; work is never split across days here.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from uuid import UUID

from ....core.config import SchedulerConfig
from ....core.observability import SLOT_SEARCHES, get_logger
from ...shared.exceptions import ValidationError
from ..repositories.scheduling_repository import SchedulingRepository
from ..value_objects.time_window import TimeInterval, free_intervals
from .allocation_overlay import AllocationOverlay
from .capacity_profiles import CapacityProfileResolver, StageCapacity
from .time_converter import TimeConverter

logger = get_logger(__name__)


@dataclass(frozen=True)
class SlotSearchResult:
    """A slot found on a stage, in local business time."""

    stage_id: UUID
    start: datetime
    end: datetime
    capacity_date: date
    booked_minutes: int  # already booked that day, before this slot
    capacity_minutes: int

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start, self.end)

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


class SlotFinder:
    """
    Scans working days forward from an earliest start, bounded by a horizon of
    working days, combining persisted bookings with batch reservations.
    """

    def __init__(
        self,
        repository: SchedulingRepository,
        converter: TimeConverter,
        resolver: CapacityProfileResolver,
        config: SchedulerConfig,
    ) -> None:
        self._repository = repository
        self._converter = converter
        self._resolver = resolver
        self._config = config

    async def find_slot(
        self,
        stage_id: UUID,
        duration_minutes: int,
        earliest: datetime,
        horizon_days: int | None = None,
        overlay: AllocationOverlay | None = None,
    ) -> datetime | None:
        """
        Find the earliest local start time for a slot.

        Args:
            stage_id: Stage to place the work on
            duration_minutes: Length of the slot
            earliest: Earliest allowed start (timezone-aware instant)
            horizon_days: Working days to examine, defaults to the configured horizon
            overlay: Batch reservations to respect

        Returns:
            Local start time, or None when nothing fits within the horizon

        Raises:
            ValidationError: If the duration or horizon is not positive or
                ``earliest`` is naive
            InvalidStageConfigurationError: If the stage is missing or has no capacity
        """
        result = await self.search(
            stage_id, duration_minutes, earliest, horizon_days, overlay
        )
        return result.start if result else None

    async def search(
        self,
        stage_id: UUID,
        duration_minutes: int,
        earliest: datetime,
        horizon_days: int | None = None,
        overlay: AllocationOverlay | None = None,
        capacity: StageCapacity | None = None,
    ) -> SlotSearchResult | None:
        """Like find_slot, but returns the full placement details."""
        if duration_minutes <= 0:
            raise ValidationError(
                "duration_minutes", duration_minutes, "Duration must be positive"
            )
        horizon = self._config.horizon_days if horizon_days is None else horizon_days
        if horizon <= 0:
            raise ValidationError("horizon_days", horizon, "Horizon must be positive")

        local_earliest = self._converter.to_local(earliest)
        if capacity is None:
            capacity = await self._resolver.resolve(stage_id)
        overlay = overlay or AllocationOverlay()

        hours = capacity.hours
        capacity_minutes = capacity.capacity_minutes
        if duration_minutes > min(capacity_minutes, hours.duration_minutes()):
            SLOT_SEARCHES.labels(outcome="oversize").inc()
            logger.info(
                "Duration exceeds daily capacity",
                stage_id=str(stage_id),
                duration_minutes=duration_minutes,
                capacity_minutes=capacity_minutes,
            )
            return None

        search_start = self._converter.clamp_to_working_window(local_earliest, hours)
        days = list(
            self._converter.calendar.iter_working_days(search_start.date(), horizon)
        )
        persisted = await self._persisted_by_day(stage_id, days, capacity)

        for day in days:
            window = self._converter.working_window(day, hours)
            day_bookings, day_minutes = persisted.get(day, ([], 0))
            reserved = overlay.intervals_for(stage_id, day)
            booked = day_minutes + overlay.booked_minutes(stage_id, day)

            if booked + duration_minutes > capacity_minutes:
                continue

            lower = search_start if day == search_start.date() else window.start
            for gap in free_intervals(window, day_bookings + reserved):
                candidate = max(gap.start, lower)
                end = candidate + timedelta(minutes=duration_minutes)
                if end <= gap.end:
                    SLOT_SEARCHES.labels(outcome="found").inc()
                    logger.debug(
                        "Slot found",
                        stage_id=str(stage_id),
                        start=candidate.isoformat(),
                        duration_minutes=duration_minutes,
                        booked_minutes=booked,
                    )
                    return SlotSearchResult(
                        stage_id=stage_id,
                        start=candidate,
                        end=end,
                        capacity_date=day,
                        booked_minutes=booked,
                        capacity_minutes=capacity_minutes,
                    )

        SLOT_SEARCHES.labels(outcome="not_found").inc()
        logger.info(
            "No slot within horizon",
            stage_id=str(stage_id),
            duration_minutes=duration_minutes,
            horizon_days=horizon,
        )
        return None

    async def _persisted_by_day(
        self, stage_id: UUID, days: list[date], capacity: StageCapacity
    ) -> dict[date, tuple[list[TimeInterval], int]]:
        """Committed bookings in the horizon, grouped by local start date."""
        if not days:
            return {}

        range_start = self._converter.working_window(days[0], capacity.hours).start
        range_end = self._converter.working_window(days[-1], capacity.hours).end
        bookings = await self._repository.list_bookings(
            stage_id,
            self._converter.to_absolute(range_start),
            self._converter.to_absolute(range_end),
        )

        intervals: dict[date, list[TimeInterval]] = defaultdict(list)
        minutes: dict[date, int] = defaultdict(int)
        for booking in bookings:
            local = TimeInterval(
                self._converter.to_local(booking.start_time),
                self._converter.to_local(booking.end_time),
            )
            intervals[local.start.date()].append(local)
            minutes[local.start.date()] += booking.duration_minutes

        return {day: (intervals[day], minutes[day]) for day in intervals}
