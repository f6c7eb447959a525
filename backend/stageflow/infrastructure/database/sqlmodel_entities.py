"""
SQLModel table definitions for stage scheduling.

Instants are stored in timezone-aware columns and always written as UTC.
Backends that drop the offset (SQLite) hand back naive values, which the
mappers read as UTC.
"""

from datetime import date, datetime, time
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, Index
from sqlmodel import Column, Field, SQLModel

from stageflow.domain.scheduling.value_objects.enums import (
    BookingStatus,
    StageInstanceStatus,
)


class Stage(SQLModel, table=True):
    """Production stage table definition."""

    __tablename__ = "production_stages"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(min_length=1, max_length=100, index=True)
    order_index: int = Field(default=0, ge=0)
    daily_capacity_hours: float | None = Field(default=None, ge=0)
    working_start: time = Field(default=time(8, 0))
    working_end: time = Field(default=time(17, 30))
    max_parallel_jobs: int | None = Field(default=None, ge=1)
    is_active: bool = Field(default=True)


class CapacityProfile(SQLModel, table=True):
    """Per-stage capacity override table definition."""

    __tablename__ = "stage_capacity_profiles"
    __table_args__ = (
        CheckConstraint(
            "efficiency_factor > 0 AND efficiency_factor <= 1",
            name="ck_profile_efficiency_range",
        ),
    )

    stage_id: UUID = Field(foreign_key="production_stages.id", primary_key=True)
    daily_capacity_hours: float = Field(ge=0)
    efficiency_factor: float = Field(default=0.85)
    max_parallel_jobs: int | None = Field(default=None, ge=1)
    is_bottleneck: bool = Field(default=False)


class StageBooking(SQLModel, table=True):
    """Committed stage booking table definition."""

    __tablename__ = "stage_bookings"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_booking_interval"),
        Index("ix_stage_bookings_stage_window", "stage_id", "start_time", "end_time"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    job_id: UUID = Field(index=True)
    stage_id: UUID = Field(foreign_key="production_stages.id")
    start_time: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    end_time: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    duration_minutes: int = Field(gt=0)
    status: BookingStatus = Field(default=BookingStatus.PENDING, index=True)


class StageInstance(SQLModel, table=True):
    """A job's visit to a stage."""

    __tablename__ = "job_stage_instances"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    job_id: UUID = Field(index=True)
    stage_id: UUID = Field(foreign_key="production_stages.id")
    stage_name: str | None = Field(default=None, max_length=100)
    stage_order: int = Field(ge=0)
    estimated_duration_minutes: int | None = Field(default=None, gt=0)
    status: StageInstanceStatus = Field(default=StageInstanceStatus.PENDING, index=True)
    started_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )


class PublicHoliday(SQLModel, table=True):
    __tablename__ = "public_holidays"

    holiday_date: date = Field(primary_key=True)
    name: str | None = Field(default=None, max_length=100)
