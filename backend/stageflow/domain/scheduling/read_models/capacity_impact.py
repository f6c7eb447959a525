"""Capacity impact read models used before committing new work."""

from uuid import UUID

from pydantic import BaseModel, Field


class NewWorkItem(BaseModel):
    """Hours of prospective work on a stage."""

    stage_id: UUID
    estimated_hours: float = Field(gt=0.0)


class StageImpact(BaseModel):
    """Effect of the new work on one stage's queue."""

    stage_id: UUID
    stage_name: str | None = None
    current_queue_days: int = Field(ge=0)
    additional_days: float = Field(ge=0.0)
    new_queue_days: float = Field(ge=0.0)
    utilization_increase: float = Field(ge=0.0)
    becomes_bottleneck: bool = False


class CapacityImpactReport(BaseModel):
    """Impacts sorted by new queue days, worst first."""

    impacts: list[StageImpact] = Field(default_factory=list)
    total_impact_days: int = Field(ge=0, default=0)

    @property
    def new_bottlenecks(self) -> list[StageImpact]:
        return [impact for impact in self.impacts if impact.becomes_bottleneck]
