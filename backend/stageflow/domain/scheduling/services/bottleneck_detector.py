"""
Bottleneck Detection and Capacity Impact

Ranks stages by queue days and projects how prospective work would lengthen
each stage's queue before it is committed.
"""

import math
from collections.abc import Iterable
from uuid import UUID

from ....core.config import SchedulerConfig
from ....core.observability import get_logger
from ...shared.exceptions import InvalidStageConfigurationError
from ..read_models.capacity_impact import CapacityImpactReport, NewWorkItem, StageImpact
from ..read_models.workload import WorkloadSnapshot
from .workload_analyzer import WorkloadAnalyzer

logger = get_logger(__name__)


class BottleneckDetector:
    def __init__(self, workload_analyzer: WorkloadAnalyzer) -> None:
        self._workload_analyzer = workload_analyzer

    async def rank_stages(self) -> list[WorkloadSnapshot]:
        """All analysable stages, largest queue first."""
        return await self._workload_analyzer.get_all_stage_workloads()

    async def detect(self, limit: int = 5) -> list[WorkloadSnapshot]:
        """Stages whose queue exceeds the bottleneck threshold."""
        return await self._workload_analyzer.get_bottleneck_stages(limit)


class CapacityImpactEstimator:
    """
    Estimates the queue impact of new work per stage.

    Utilization increase is the new hours as a percentage of one working week of
    the stage's effective capacity.
    """

    def __init__(
        self, workload_analyzer: WorkloadAnalyzer, config: SchedulerConfig
    ) -> None:
        self._workload_analyzer = workload_analyzer
        self._config = config

    async def estimate_impact(
        self, new_work: Iterable[NewWorkItem]
    ) -> CapacityImpactReport:
        """
        Project the effect of new work.

        Args:
            new_work: Prospective hours per stage; repeated stages are summed

        Returns:
            CapacityImpactReport, impacts sorted by new queue days descending.
            Stages that cannot be analysed are left out.
        """
        hours_by_stage: dict[UUID, float] = {}
        for item in new_work:
            hours_by_stage[item.stage_id] = (
                hours_by_stage.get(item.stage_id, 0.0) + item.estimated_hours
            )

        threshold = self._config.bottleneck_queue_days_threshold
        week_days = self._config.calendar.working_days_per_week
        impacts: list[StageImpact] = []

        for stage_id, hours in hours_by_stage.items():
            try:
                snapshot = await self._workload_analyzer.get_stage_workload(stage_id)
            except InvalidStageConfigurationError as e:
                logger.warning(
                    "Skipping stage in impact estimate",
                    stage_id=str(stage_id),
                    reason=e.reason,
                )
                continue

            effective = snapshot.effective_daily_capacity_hours
            current = snapshot.queue_days_to_process
            additional = hours / effective
            new_queue_days = current + additional

            impacts.append(
                StageImpact(
                    stage_id=stage_id,
                    stage_name=snapshot.stage_name,
                    current_queue_days=current,
                    additional_days=additional,
                    new_queue_days=new_queue_days,
                    utilization_increase=hours / (effective * week_days) * 100,
                    becomes_bottleneck=current <= threshold < new_queue_days,
                )
            )

        impacts.sort(key=lambda impact: impact.new_queue_days, reverse=True)
        total = math.ceil(round(impacts[0].new_queue_days, 6)) if impacts else 0
        return CapacityImpactReport(impacts=impacts, total_impact_days=total)
