"""
Composition Root

Builds the scheduling services once, wired to one repository and one immutable
config, and hands them out as a single value. Nothing here is a process-wide
singleton; tests build isolated instances the same way.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from ..core.config import SchedulerConfig
from ..core.observability import get_logger
from ..domain.scheduling.repositories.scheduling_repository import SchedulingRepository
from ..domain.scheduling.services import (
    BottleneckDetector,
    CapacityImpactEstimator,
    CapacityProfileResolver,
    CapacityScheduler,
    DueDateService,
    SlotFinder,
    TimeConverter,
    TimelineCalculator,
    WorkloadAnalyzer,
)
from ..domain.scheduling.services.capacity_scheduler import utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class SchedulingServices:
    config: SchedulerConfig
    repository: SchedulingRepository
    converter: TimeConverter
    resolver: CapacityProfileResolver
    slot_finder: SlotFinder
    scheduler: CapacityScheduler
    workload_analyzer: WorkloadAnalyzer
    timeline_calculator: TimelineCalculator
    bottleneck_detector: BottleneckDetector
    impact_estimator: CapacityImpactEstimator
    due_date_service: DueDateService


def wire_scheduling_services(
    repository: SchedulingRepository,
    config: SchedulerConfig,
    clock: Callable[[], datetime] = utc_now,
) -> SchedulingServices:
    """Wire every service against the given repository and config."""
    converter = TimeConverter(config)
    resolver = CapacityProfileResolver(repository, config)
    slot_finder = SlotFinder(repository, converter, resolver, config)
    workload_analyzer = WorkloadAnalyzer(repository, resolver, config)
    timeline_calculator = TimelineCalculator(
        repository,
        slot_finder,
        workload_analyzer,
        resolver,
        converter,
        config,
        clock=clock,
    )

    return SchedulingServices(
        config=config,
        repository=repository,
        converter=converter,
        resolver=resolver,
        slot_finder=slot_finder,
        scheduler=CapacityScheduler(
            repository, slot_finder, resolver, converter, config, clock=clock
        ),
        workload_analyzer=workload_analyzer,
        timeline_calculator=timeline_calculator,
        bottleneck_detector=BottleneckDetector(workload_analyzer),
        impact_estimator=CapacityImpactEstimator(workload_analyzer, config),
        due_date_service=DueDateService(
            repository, timeline_calculator, converter, config, clock=clock
        ),
    )


async def build_scheduling_services(
    repository: SchedulingRepository,
    config: SchedulerConfig,
    clock: Callable[[], datetime] = utc_now,
) -> SchedulingServices:
    """
    Load stored public holidays into the calendar, then wire the services.

    Raises:
        PersistenceFailureError: If holidays cannot be read
    """
    holidays = await repository.list_holidays()
    if holidays:
        config = config.with_holidays(holidays)
    logger.info(
        "Scheduling services composed",
        timezone=config.timezone,
        holidays=len(config.calendar.holidays),
        horizon_days=config.horizon_days,
    )
    return wire_scheduling_services(repository, config, clock)
