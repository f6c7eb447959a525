"""
Workload Analyzer

Projects each stage's open bookings into a WorkloadSnapshot. Queue days use
ceiling semantics: any partial day of pending work occupies a whole extra
working day before the stage clears its queue.
"""

import math
from uuid import UUID

from ....core.config import SchedulerConfig
from ....core.observability import get_logger
from ...shared.exceptions import InvalidStageConfigurationError
from ..read_models.workload import WorkloadSnapshot
from ..repositories.scheduling_repository import SchedulingRepository
from ..value_objects.enums import BookingStatus
from .capacity_profiles import CapacityProfileResolver, StageCapacity

logger = get_logger(__name__)


def queue_days(pending_hours: float, effective_daily_capacity_hours: float) -> int:
    """
    Working days needed to clear pending work, rounded up.

    The ratio is rounded to 6 places first so float noise (e.g. 3.0000000001)
    does not add a day.
    """
    if pending_hours <= 0:
        return 0
    if effective_daily_capacity_hours <= 0:
        raise ValueError("Effective daily capacity must be positive")
    return math.ceil(round(pending_hours / effective_daily_capacity_hours, 6))


class WorkloadAnalyzer:
    def __init__(
        self,
        repository: SchedulingRepository,
        resolver: CapacityProfileResolver,
        config: SchedulerConfig,
    ) -> None:
        self._repository = repository
        self._resolver = resolver
        self._config = config

    async def get_stage_workload(
        self, stage_id: UUID, capacity: StageCapacity | None = None
    ) -> WorkloadSnapshot:
        """
        Build the workload snapshot of one stage.

        Args:
            stage_id: Stage to analyse
            capacity: Already resolved capacity, resolved here when omitted

        Returns:
            WorkloadSnapshot of the stage's pending and active bookings

        Raises:
            InvalidStageConfigurationError: If the stage is missing or has no capacity
            PersistenceFailureError: If bookings cannot be read
        """
        if capacity is None:
            capacity = await self._resolver.resolve(stage_id)
        bookings = await self._repository.list_open_bookings(stage_id)

        pending = [b for b in bookings if b.status == BookingStatus.PENDING]
        active = [b for b in bookings if b.status == BookingStatus.ACTIVE]
        pending_hours = sum(b.duration_minutes for b in pending) / 60
        active_hours = sum(b.duration_minutes for b in active) / 60

        days = queue_days(pending_hours, capacity.effective_capacity_hours)
        threshold = self._config.bottleneck_queue_days_threshold

        return WorkloadSnapshot(
            stage_id=stage_id,
            stage_name=capacity.stage_name,
            total_pending_hours=pending_hours,
            total_active_hours=active_hours,
            pending_job_count=len({b.job_id for b in pending}),
            active_job_count=len({b.job_id for b in active}),
            daily_capacity_hours=capacity.daily_capacity_hours,
            efficiency_factor=capacity.efficiency_factor,
            max_parallel_jobs=capacity.max_parallel_jobs,
            queue_days_to_process=days,
            is_bottleneck=capacity.is_bottleneck or days > threshold,
            is_fallback=capacity.is_fallback,
        )

    async def get_all_stage_workloads(self) -> list[WorkloadSnapshot]:
        """Snapshots of every active stage, largest queue first."""
        snapshots: list[WorkloadSnapshot] = []
        for stage in await self._repository.list_stages():
            try:
                snapshots.append(await self.get_stage_workload(stage.id))
            except InvalidStageConfigurationError as e:
                logger.warning(
                    "Skipping misconfigured stage",
                    stage_id=str(stage.id),
                    reason=e.reason,
                )

        snapshots.sort(key=lambda s: s.queue_days_to_process, reverse=True)
        return snapshots

    async def get_bottleneck_stages(self, limit: int = 5) -> list[WorkloadSnapshot]:
        """Stages whose queue exceeds the bottleneck threshold, worst first."""
        threshold = self._config.bottleneck_queue_days_threshold
        snapshots = await self.get_all_stage_workloads()
        return [s for s in snapshots if s.queue_days_to_process > threshold][:limit]
