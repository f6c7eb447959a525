"""Due date read models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from ..value_objects.enums import DueDateWarningLevel


class DueDateEstimate(BaseModel):
    """Internal completion estimate and the buffered due date promised to the customer."""

    job_id: UUID
    internal_completion: datetime
    due_date: datetime
    buffer_days: int = Field(ge=0)
    total_working_days: int = Field(ge=0)


class DueDateWarning(BaseModel):
    job_id: UUID
    due_date: datetime
    projected_completion: datetime | None = None
    days_late: int = 0
    level: DueDateWarningLevel = DueDateWarningLevel.GREEN


class OverdueStage(BaseModel):
    """An active stage running past its estimated completion."""

    stage_instance_id: UUID
    job_id: UUID
    stage_id: UUID
    stage_name: str | None = None
    started_at: datetime
    expected_completion: datetime
    overrun_minutes: int = Field(ge=0)
