"""Job timeline read model: a job's projected path through its stages."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, computed_field


class TimelineStage(BaseModel):
    """Projected start and completion of one stage of a job."""

    stage_id: UUID
    stage_name: str | None = None
    stage_order: int
    start_time: datetime
    end_time: datetime
    duration_minutes: int = Field(gt=0)
    queue_days_to_process: int = Field(ge=0, default=0)
    is_bottleneck: bool = False
    # False when the work did not fit one slot and was spread over working windows
    placed_in_slot: bool = True

    @property
    def duration_hours(self) -> float:
        return self.duration_minutes / 60


class JobTimeline(BaseModel):
    """Ordered stage projections for one job plus aggregate figures."""

    job_id: UUID
    calculated_at: datetime
    stages: list[TimelineStage] = Field(default_factory=list)
    total_working_days: int = Field(ge=0, default=0)
    total_calendar_days: int = Field(ge=0, default=0)
    bottleneck_stage_id: UUID | None = None
    bottleneck_stage_name: str | None = None
    critical_path: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def estimated_completion(self) -> datetime | None:
        if not self.stages:
            return None
        return self.stages[-1].end_time

    @property
    def total_duration_minutes(self) -> int:
        return sum(stage.duration_minutes for stage in self.stages)
