"""Stage and capacity profile entities."""

from datetime import time
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

from ..value_objects.business_calendar import BusinessHours


class Stage(BaseModel):
    """
    A discrete production step with its own daily capacity and working hours.

    Stages are seeded externally and are read-only to the scheduler.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1, max_length=100)
    order_index: int = Field(ge=0, default=0)

    # Nominal capacity; a CapacityProfile takes precedence when present
    daily_capacity_hours: float | None = Field(default=None, ge=0.0)
    working_start: time = time(8, 0)
    working_end: time = time(17, 30)
    max_parallel_jobs: int | None = Field(default=None, ge=1)
    is_active: bool = True

    @model_validator(mode="after")
    def _check_working_hours(self) -> "Stage":
        if self.working_end <= self.working_start:
            raise ValueError("Stage working hours must end after they start")
        return self

    @property
    def business_hours(self) -> BusinessHours:
        return BusinessHours(self.working_start, self.working_end)


class CapacityProfile(BaseModel):
    """Per-stage override of daily capacity and efficiency."""

    stage_id: UUID
    daily_capacity_hours: float = Field(ge=0.0)
    efficiency_factor: float = Field(gt=0.0, le=1.0, default=0.85)
    max_parallel_jobs: int | None = Field(default=None, ge=1)
    is_bottleneck: bool = False

    @property
    def effective_capacity_hours(self) -> float:
        """Nominal hours scaled by the efficiency factor."""
        return self.daily_capacity_hours * self.efficiency_factor
