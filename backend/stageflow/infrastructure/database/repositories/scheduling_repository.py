"""
SQLModel scheduling repository.

Implements the SchedulingRepository interface over an async SQLAlchemy engine.
Each call runs in its own AsyncSession and awaits the driver; persist_bookings
commits all of its bookings in one transaction. SQLAlchemy errors surface as
PersistenceFailureError.
"""

from collections.abc import Iterable
from datetime import date, datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from stageflow.core.observability import get_logger
from stageflow.domain.scheduling.entities.booking import StageBooking as DomainBooking
from stageflow.domain.scheduling.entities.stage import CapacityProfile as DomainProfile
from stageflow.domain.scheduling.entities.stage import Stage as DomainStage
from stageflow.domain.scheduling.entities.stage_instance import (
    StageInstance as DomainInstance,
)
from stageflow.domain.scheduling.repositories.scheduling_repository import (
    SchedulingRepository,
)
from stageflow.domain.scheduling.value_objects.enums import (
    BookingStatus,
    StageInstanceStatus,
)
from stageflow.domain.shared.exceptions import PersistenceFailureError
from stageflow.infrastructure.database.sqlmodel_entities import (
    CapacityProfile,
    PublicHoliday,
    Stage,
    StageBooking,
    StageInstance,
)

from .mappers import BookingMapper, StageInstanceMapper, StageMapper, as_utc

logger = get_logger(__name__)


class SQLModelSchedulingRepository(SchedulingRepository):
    """
    Repository implementation backed by SQLModel tables.

    Stages, profiles, instances and holidays are seeded through the ``add_*``
    helpers or by external tooling; the scheduler itself only writes bookings.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    async def get_stage(self, stage_id: UUID) -> DomainStage | None:
        try:
            async with self._session_factory() as session:
                row = await session.get(Stage, stage_id)
                return StageMapper.sql_to_domain(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceFailureError("get_stage", str(e)) from e

    async def list_stages(self, active_only: bool = True) -> list[DomainStage]:
        try:
            async with self._session_factory() as session:
                statement = select(Stage).order_by(col(Stage.order_index))
                if active_only:
                    statement = statement.where(col(Stage.is_active).is_(True))
                rows = await session.exec(statement)
                return [StageMapper.sql_to_domain(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceFailureError("list_stages", str(e)) from e

    async def get_capacity_profile(self, stage_id: UUID) -> DomainProfile | None:
        try:
            async with self._session_factory() as session:
                row = await session.get(CapacityProfile, stage_id)
                return StageMapper.profile_to_domain(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceFailureError("get_capacity_profile", str(e)) from e

    async def list_bookings(
        self, stage_id: UUID, start: datetime, end: datetime
    ) -> list[DomainBooking]:
        try:
            async with self._session_factory() as session:
                statement = (
                    select(StageBooking)
                    .where(StageBooking.stage_id == stage_id)
                    .where(col(StageBooking.start_time) < as_utc(end))
                    .where(col(StageBooking.end_time) > as_utc(start))
                    .order_by(col(StageBooking.start_time))
                )
                rows = await session.exec(statement)
                return [BookingMapper.sql_to_domain(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceFailureError("list_bookings", str(e)) from e

    async def list_open_bookings(self, stage_id: UUID) -> list[DomainBooking]:
        try:
            async with self._session_factory() as session:
                statement = (
                    select(StageBooking)
                    .where(StageBooking.stage_id == stage_id)
                    .where(
                        col(StageBooking.status).in_(
                            [BookingStatus.PENDING, BookingStatus.ACTIVE]
                        )
                    )
                    .order_by(col(StageBooking.start_time))
                )
                rows = await session.exec(statement)
                return [BookingMapper.sql_to_domain(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceFailureError("list_open_bookings", str(e)) from e

    async def list_stage_instances_for_job(self, job_id: UUID) -> list[DomainInstance]:
        try:
            async with self._session_factory() as session:
                statement = (
                    select(StageInstance)
                    .where(StageInstance.job_id == job_id)
                    .where(StageInstance.status != StageInstanceStatus.COMPLETED)
                    .order_by(col(StageInstance.stage_order))
                )
                return [
                    StageInstanceMapper.sql_to_domain(row)
                    for row in await session.exec(statement)
                ]
        except SQLAlchemyError as e:
            raise PersistenceFailureError("list_stage_instances_for_job", str(e)) from e

    async def persist_bookings(
        self, bookings: list[DomainBooking]
    ) -> list[DomainBooking]:
        try:
            async with self._session_factory() as session:
                for booking in bookings:
                    session.add(BookingMapper.domain_to_sql(booking))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                "Booking write rolled back",
                booking_count=len(bookings),
                error=str(e),
            )
            raise PersistenceFailureError("persist_bookings", str(e)) from e
        return list(bookings)

    async def list_active_stages_overdue(
        self, as_of: datetime, default_duration_minutes: int = 60
    ) -> list[DomainInstance]:
        try:
            async with self._session_factory() as session:
                statement = (
                    select(StageInstance)
                    .where(StageInstance.status == StageInstanceStatus.ACTIVE)
                    .where(col(StageInstance.started_at).is_not(None))
                    .order_by(col(StageInstance.started_at))
                )
                instances = [
                    StageInstanceMapper.sql_to_domain(row)
                    for row in await session.exec(statement)
                ]
        except SQLAlchemyError as e:
            raise PersistenceFailureError("list_active_stages_overdue", str(e)) from e

        as_of = as_utc(as_of)
        return [
            instance
            for instance in instances
            if instance.expected_completion(default_duration_minutes) < as_of
        ]

    async def list_holidays(self) -> list[date]:
        try:
            async with self._session_factory() as session:
                statement = select(PublicHoliday).order_by(
                    col(PublicHoliday.holiday_date)
                )
                return [row.holiday_date for row in await session.exec(statement)]
        except SQLAlchemyError as e:
            raise PersistenceFailureError("list_holidays", str(e)) from e

    # Seeding helpers

    async def add_stage(
        self, stage: DomainStage, profile: DomainProfile | None = None
    ) -> DomainStage:
        """Insert a stage and, optionally, its capacity profile."""
        await self._add_rows([StageMapper.domain_to_sql(stage)], "add_stage")
        if profile is not None:
            await self._add_rows(
                [StageMapper.profile_to_sql(profile)], "add_capacity_profile"
            )
        return stage

    async def add_stage_instances(self, instances: Iterable[DomainInstance]) -> None:
        await self._add_rows(
            [StageInstanceMapper.domain_to_sql(i) for i in instances],
            "add_stage_instances",
        )

    async def add_holiday(self, holiday: date, name: str | None = None) -> None:
        await self._add_rows(
            [PublicHoliday(holiday_date=holiday, name=name)], "add_holiday"
        )

    async def _add_rows(self, rows: list, operation: str) -> None:
        try:
            async with self._session_factory() as session:
                for row in rows:
                    session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceFailureError(operation, str(e)) from e
