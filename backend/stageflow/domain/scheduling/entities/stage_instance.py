"""A job's visit to one stage of its routing."""

from datetime import datetime, timedelta
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from ..value_objects.enums import StageInstanceStatus


class StageInstance(BaseModel):
    """
    One stage in a job's ordered routing.

    The estimated duration may be unknown; consumers substitute the configured
    default stage duration in that case.
    """

    id: UUID = Field(default_factory=uuid4)
    job_id: UUID
    stage_id: UUID
    stage_name: str | None = None
    stage_order: int = Field(ge=0)
    estimated_duration_minutes: int | None = Field(default=None, gt=0)
    status: StageInstanceStatus = StageInstanceStatus.PENDING
    started_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == StageInstanceStatus.COMPLETED

    def expected_completion(self, default_minutes: int) -> datetime | None:
        """When an active stage should finish, based on its start and estimate."""
        if self.started_at is None:
            return None
        minutes = self.estimated_duration_minutes or default_minutes
        return self.started_at + timedelta(minutes=minutes)
