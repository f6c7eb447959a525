"""
Timeline Calculator

Chains a job's remaining stages in order. Each stage starts no earlier than its
predecessor's completion and is placed with the SlotFinder against a
timeline-scoped overlay. Work that cannot be placed as one slot starts after
the stage's queue clears and is spread over consecutive working windows.
"""

import math
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from ....core.config import SchedulerConfig
from ....core.observability import get_logger, monitor_performance
from ..read_models.timeline import JobTimeline, TimelineStage
from ..read_models.workload import WorkloadSnapshot
from ..repositories.scheduling_repository import SchedulingRepository
from .allocation_overlay import AllocationOverlay
from .capacity_profiles import CapacityProfileResolver, StageCapacity
from .capacity_scheduler import utc_now
from .slot_finder import SlotFinder
from .time_converter import TimeConverter
from .workload_analyzer import WorkloadAnalyzer

logger = get_logger(__name__)


class TimelineCalculator:
    def __init__(
        self,
        repository: SchedulingRepository,
        slot_finder: SlotFinder,
        workload_analyzer: WorkloadAnalyzer,
        resolver: CapacityProfileResolver,
        converter: TimeConverter,
        config: SchedulerConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._slot_finder = slot_finder
        self._workload_analyzer = workload_analyzer
        self._resolver = resolver
        self._converter = converter
        self._config = config
        self._clock = clock

    @monitor_performance("calculate_timeline")
    async def calculate_timeline(
        self, job_id: UUID, now: datetime | None = None
    ) -> JobTimeline:
        """
        Project a job's remaining stages.

        Args:
            job_id: Job to project
            now: Reference instant, defaults to the current time

        Returns:
            JobTimeline; empty (zero days, no bottleneck) when the job has no
            open stages

        Raises:
            InvalidStageConfigurationError: If a stage on the route is missing
            PersistenceFailureError: If stage instances or bookings cannot be read
        """
        now = now or self._clock()
        self._converter.to_local(now)  # rejects naive values

        instances = [
            instance
            for instance in await self._repository.list_stage_instances_for_job(job_id)
            if not instance.is_completed
        ]
        instances.sort(key=lambda instance: instance.stage_order)

        timeline = JobTimeline(job_id=job_id, calculated_at=now)
        if not instances:
            return timeline

        overlay = AllocationOverlay()
        cursor = now

        for instance in instances:
            duration = (
                instance.estimated_duration_minutes
                or self._config.default_stage_duration_minutes
            )
            capacity = await self._resolver.resolve(instance.stage_id)
            snapshot = await self._workload_analyzer.get_stage_workload(
                instance.stage_id, capacity
            )

            placement = await self._slot_finder.search(
                instance.stage_id,
                duration,
                cursor,
                overlay=overlay,
                capacity=capacity,
            )
            if placement is not None:
                overlay.reserve(instance.stage_id, job_id, placement.interval)
                start_local, end_local = placement.start, placement.end
            else:
                start_local = max(
                    self._converter.to_local(cursor),
                    self._queue_based_start(now, snapshot, capacity),
                )
                start_local = self._converter.clamp_to_working_window(
                    start_local, capacity.hours
                )
                end_local = self._converter.advance_working_minutes(
                    start_local, duration, capacity.hours
                )
                logger.debug(
                    "Stage spread over working windows",
                    job_id=str(job_id),
                    stage_id=str(instance.stage_id),
                    duration_minutes=duration,
                )

            timeline.stages.append(
                TimelineStage(
                    stage_id=instance.stage_id,
                    stage_name=instance.stage_name or capacity.stage_name,
                    stage_order=instance.stage_order,
                    start_time=self._converter.to_absolute(start_local),
                    end_time=self._converter.to_absolute(end_local),
                    duration_minutes=duration,
                    queue_days_to_process=snapshot.queue_days_to_process,
                    is_bottleneck=snapshot.is_bottleneck,
                    placed_in_slot=placement is not None,
                )
            )
            cursor = self._converter.to_absolute(end_local)

        self._summarize(timeline, now)
        return timeline

    def _queue_based_start(
        self, now: datetime, snapshot: WorkloadSnapshot, capacity: StageCapacity
    ) -> datetime:
        """Start of the working day on which the stage's current queue has cleared."""
        base = self._converter.clamp_to_working_window(
            self._converter.to_local(now), capacity.hours
        )
        if snapshot.queue_days_to_process <= 0:
            return base
        queue_date = self._converter.calendar.add_working_days(
            base.date(), snapshot.queue_days_to_process
        )
        return self._converter.local_datetime(queue_date, capacity.hours.start_time)

    def _summarize(self, timeline: JobTimeline, now: datetime) -> None:
        timeline.total_working_days = math.ceil(
            timeline.total_duration_minutes / self._config.working_day_minutes
        )
        completion = timeline.estimated_completion
        span_seconds = max(0.0, (completion - now).total_seconds())
        timeline.total_calendar_days = math.ceil(span_seconds / 86400)

        worst = max(timeline.stages, key=lambda stage: stage.queue_days_to_process)
        if worst.queue_days_to_process > 0:
            timeline.bottleneck_stage_id = worst.stage_id
            timeline.bottleneck_stage_name = worst.stage_name

        timeline.critical_path = [
            stage.stage_name or str(stage.stage_id)
            for stage in timeline.stages
            if stage.is_bottleneck
        ]
