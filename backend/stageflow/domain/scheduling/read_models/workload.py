"""
Stage workload read model.

A WorkloadSnapshot is always a read-time projection of a stage's open bookings;
it is never stored.
"""

from uuid import UUID

from pydantic import BaseModel, Field, computed_field


class WorkloadSnapshot(BaseModel):
    """Per-stage aggregate of pending and active work."""

    stage_id: UUID
    stage_name: str | None = None

    total_pending_hours: float = Field(ge=0.0, default=0.0)
    total_active_hours: float = Field(ge=0.0, default=0.0)
    pending_job_count: int = Field(ge=0, default=0)
    active_job_count: int = Field(ge=0, default=0)

    daily_capacity_hours: float = Field(ge=0.0)
    efficiency_factor: float = Field(gt=0.0, le=1.0)
    max_parallel_jobs: int | None = None

    queue_days_to_process: int = Field(ge=0, default=0)
    is_bottleneck: bool = False
    is_fallback: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def effective_daily_capacity_hours(self) -> float:
        return self.daily_capacity_hours * self.efficiency_factor

    @property
    def total_open_hours(self) -> float:
        return self.total_pending_hours + self.total_active_hours
