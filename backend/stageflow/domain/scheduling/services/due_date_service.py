"""
Due Date Service

Derives customer due dates from projected job timelines and grades how far a
projected completion runs past a promised due date.
"""

import math
from collections.abc import Callable, Mapping
from datetime import datetime
from uuid import UUID

from ....core.config import SchedulerConfig
from ....core.observability import get_logger
from ..read_models.due_date import DueDateEstimate, DueDateWarning, OverdueStage
from ..repositories.scheduling_repository import SchedulingRepository
from ..value_objects.enums import DueDateWarningLevel
from .capacity_scheduler import utc_now
from .time_converter import TimeConverter
from .timeline_calculator import TimelineCalculator

logger = get_logger(__name__)


def calculate_warning_level(
    due_date: datetime, projected_completion: datetime
) -> tuple[DueDateWarningLevel, int]:
    """
    Grade lateness of a projected completion.

    Lateness is counted in calendar days, rounded up: on time or early is
    green, one day amber, two days red, anything later critical.

    Returns:
        (warning level, days late); days late is never negative
    """
    seconds = (projected_completion - due_date).total_seconds()
    days_late = max(0, math.ceil(seconds / 86400))

    if days_late <= 0:
        level = DueDateWarningLevel.GREEN
    elif days_late == 1:
        level = DueDateWarningLevel.AMBER
    elif days_late == 2:
        level = DueDateWarningLevel.RED
    else:
        level = DueDateWarningLevel.CRITICAL
    return level, days_late


class DueDateService:
    def __init__(
        self,
        repository: SchedulingRepository,
        timeline_calculator: TimelineCalculator,
        converter: TimeConverter,
        config: SchedulerConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._timeline_calculator = timeline_calculator
        self._converter = converter
        self._config = config
        self._clock = clock

    async def calculate_initial_due_date(
        self, job_id: UUID, now: datetime | None = None
    ) -> DueDateEstimate | None:
        """
        Estimate completion and the buffered due date for a job.

        The due date is the projected completion moved forward by the
        configured number of working days, keeping the time of day.

        Returns:
            DueDateEstimate, or None when the job has no open stages
        """
        timeline = await self._timeline_calculator.calculate_timeline(job_id, now)
        completion = timeline.estimated_completion
        if completion is None:
            return None

        buffer_days = self._config.due_date_buffer_days
        local_completion = self._converter.to_local(completion)
        due_day = self._converter.calendar.add_working_days(
            local_completion.date(), buffer_days
        )
        due_date = self._converter.to_absolute(
            self._converter.local_datetime(due_day, local_completion.time())
        )

        logger.info(
            "Due date calculated",
            job_id=str(job_id),
            internal_completion=completion.isoformat(),
            due_date=due_date.isoformat(),
        )
        return DueDateEstimate(
            job_id=job_id,
            internal_completion=completion,
            due_date=due_date,
            buffer_days=buffer_days,
            total_working_days=timeline.total_working_days,
        )

    def calculate_warning_level(
        self, due_date: datetime, projected_completion: datetime
    ) -> tuple[DueDateWarningLevel, int]:
        return calculate_warning_level(due_date, projected_completion)

    async def evaluate_job(
        self, job_id: UUID, due_date: datetime, now: datetime | None = None
    ) -> DueDateWarning:
        """Compare a job's current projection against its promised due date."""
        timeline = await self._timeline_calculator.calculate_timeline(job_id, now)
        return self.grade(job_id, due_date, timeline.estimated_completion)

    def grade(
        self, job_id: UUID, due_date: datetime, completion: datetime | None
    ) -> DueDateWarning:
        """Warning for an already projected completion; None means nothing left to do."""
        if completion is None:
            return DueDateWarning(job_id=job_id, due_date=due_date)

        level, days_late = calculate_warning_level(due_date, completion)
        return DueDateWarning(
            job_id=job_id,
            due_date=due_date,
            projected_completion=completion,
            days_late=days_late,
            level=level,
        )

    async def evaluate_jobs(
        self, due_dates: Mapping[UUID, datetime], now: datetime | None = None
    ) -> list[DueDateWarning]:
        """Evaluate several jobs and return only those not on track."""
        warnings: list[DueDateWarning] = []
        for job_id, due_date in due_dates.items():
            warning = await self.evaluate_job(job_id, due_date, now)
            if warning.level != DueDateWarningLevel.GREEN:
                warnings.append(warning)
        return warnings

    async def find_overdue_stages(
        self, as_of: datetime | None = None
    ) -> list[OverdueStage]:
        """
        Active stages running past their estimated completion.

        Called by an external periodic sweep, which decides what to recalculate.
        """
        as_of = as_of or self._clock()
        self._converter.to_local(as_of)  # rejects naive values
        default_minutes = self._config.default_stage_duration_minutes

        instances = await self._repository.list_active_stages_overdue(
            as_of, default_minutes
        )
        overdue: list[OverdueStage] = []
        for instance in instances:
            expected = instance.expected_completion(default_minutes)
            if expected is None:
                continue
            overdue.append(
                OverdueStage(
                    stage_instance_id=instance.id,
                    job_id=instance.job_id,
                    stage_id=instance.stage_id,
                    stage_name=instance.stage_name,
                    started_at=instance.started_at,
                    expected_completion=expected,
                    overrun_minutes=max(
                        0, int((as_of - expected).total_seconds() // 60)
                    ),
                )
            )
        return overdue
