"""
Capacity Profile Resolution

Resolves the capacity a stage offers per working day. Resolution order is the
stage's capacity profile, then the stage's nominal capacity, then configured
defaults. A failing lookup degrades to defaults instead of aborting the caller.
"""

from dataclasses import dataclass
from uuid import UUID

from ....core.config import SchedulerConfig
from ....core.observability import CAPACITY_FALLBACKS, get_logger
from ...shared.exceptions import InvalidStageConfigurationError, PersistenceFailureError
from ..entities.stage import CapacityProfile, Stage
from ..repositories.scheduling_repository import SchedulingRepository
from ..value_objects.business_calendar import BusinessHours

logger = get_logger(__name__)


@dataclass(frozen=True)
class StageCapacity:
    """Resolved capacity and working hours of one stage."""

    stage_id: UUID
    daily_capacity_hours: float
    efficiency_factor: float
    hours: BusinessHours
    stage_name: str | None = None
    max_parallel_jobs: int | None = None
    is_bottleneck: bool = False
    is_fallback: bool = False

    @property
    def capacity_minutes(self) -> int:
        """Raw daily capacity used for slot placement."""
        return int(round(self.daily_capacity_hours * 60))

    @property
    def effective_capacity_hours(self) -> float:
        return self.daily_capacity_hours * self.efficiency_factor


class CapacityProfileResolver:
    """Looks up stage and profile data and turns them into a StageCapacity."""

    def __init__(self, repository: SchedulingRepository, config: SchedulerConfig) -> None:
        self._repository = repository
        self._config = config

    async def resolve(self, stage_id: UUID) -> StageCapacity:
        """
        Resolve a stage's capacity.

        Args:
            stage_id: Stage to resolve

        Returns:
            StageCapacity, flagged ``is_fallback`` when defaults had to be used
            because a lookup failed

        Raises:
            InvalidStageConfigurationError: If the stage does not exist or has
                no capacity
        """
        try:
            stage = await self._repository.get_stage(stage_id)
        except PersistenceFailureError as e:
            return self._fallback(stage_id, None, "stage_lookup_failed", e)

        if stage is None:
            raise InvalidStageConfigurationError(stage_id, "stage not found")

        try:
            profile = await self._repository.get_capacity_profile(stage_id)
        except PersistenceFailureError as e:
            return self._fallback(stage_id, stage, "profile_lookup_failed", e)

        return self._build(stage, profile)

    def _build(self, stage: Stage, profile: CapacityProfile | None) -> StageCapacity:
        if profile is not None:
            hours = profile.daily_capacity_hours
            efficiency = profile.efficiency_factor
            max_parallel = profile.max_parallel_jobs or stage.max_parallel_jobs
            is_bottleneck = profile.is_bottleneck
        else:
            hours = (
                stage.daily_capacity_hours
                if stage.daily_capacity_hours is not None
                else self._config.default_daily_capacity_hours
            )
            efficiency = self._config.default_efficiency_factor
            max_parallel = stage.max_parallel_jobs
            is_bottleneck = False

        if hours <= 0:
            raise InvalidStageConfigurationError(stage.id, "daily capacity is zero")

        return StageCapacity(
            stage_id=stage.id,
            stage_name=stage.name,
            daily_capacity_hours=hours,
            efficiency_factor=efficiency,
            hours=stage.business_hours,
            max_parallel_jobs=max_parallel,
            is_bottleneck=is_bottleneck,
        )

    def _fallback(
        self,
        stage_id: UUID,
        stage: Stage | None,
        reason: str,
        error: PersistenceFailureError,
    ) -> StageCapacity:
        logger.warning(
            "Capacity lookup failed, using defaults",
            stage_id=str(stage_id),
            reason=reason,
            error=error.message,
        )
        CAPACITY_FALLBACKS.labels(reason=reason).inc()

        hours = self._config.default_daily_capacity_hours
        if stage is not None and stage.daily_capacity_hours:
            hours = stage.daily_capacity_hours

        return StageCapacity(
            stage_id=stage_id,
            stage_name=stage.name if stage else None,
            daily_capacity_hours=hours,
            efficiency_factor=self._config.default_efficiency_factor,
            hours=stage.business_hours if stage else self._config.working_hours,
            max_parallel_jobs=stage.max_parallel_jobs if stage else None,
            is_fallback=True,
        )
