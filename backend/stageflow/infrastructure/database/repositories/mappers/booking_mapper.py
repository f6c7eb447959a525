"""
Mapper for converting between booking / stage instance domain entities and SQL entities.

All instants leave the mapper as timezone-aware UTC values.
"""

from datetime import datetime, timezone

from stageflow.domain.scheduling.entities.booking import StageBooking as DomainBooking
from stageflow.domain.scheduling.entities.stage_instance import (
    StageInstance as DomainInstance,
)
from stageflow.domain.scheduling.value_objects.enums import (
    BookingStatus,
    StageInstanceStatus,
)
from stageflow.infrastructure.database.sqlmodel_entities import (
    StageBooking as SQLBooking,
)
from stageflow.infrastructure.database.sqlmodel_entities import (
    StageInstance as SQLInstance,
)


def as_utc(value: datetime) -> datetime:
    """Normalise to aware UTC; naive values coming back from the database are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BookingMapper:
    @staticmethod
    def domain_to_sql(domain_booking: DomainBooking) -> SQLBooking:
        return SQLBooking(
            id=domain_booking.id,
            job_id=domain_booking.job_id,
            stage_id=domain_booking.stage_id,
            start_time=as_utc(domain_booking.start_time),
            end_time=as_utc(domain_booking.end_time),
            duration_minutes=domain_booking.duration_minutes,
            status=domain_booking.status,
        )

    @staticmethod
    def sql_to_domain(sql_booking: SQLBooking) -> DomainBooking:
        return DomainBooking(
            id=sql_booking.id,
            job_id=sql_booking.job_id,
            stage_id=sql_booking.stage_id,
            start_time=as_utc(sql_booking.start_time),
            end_time=as_utc(sql_booking.end_time),
            duration_minutes=sql_booking.duration_minutes,
            status=BookingStatus(sql_booking.status),
        )


class StageInstanceMapper:
    @staticmethod
    def domain_to_sql(domain_instance: DomainInstance) -> SQLInstance:
        return SQLInstance(
            id=domain_instance.id,
            job_id=domain_instance.job_id,
            stage_id=domain_instance.stage_id,
            stage_name=domain_instance.stage_name,
            stage_order=domain_instance.stage_order,
            estimated_duration_minutes=domain_instance.estimated_duration_minutes,
            status=domain_instance.status,
            started_at=(
                as_utc(domain_instance.started_at)
                if domain_instance.started_at
                else None
            ),
        )

    @staticmethod
    def sql_to_domain(sql_instance: SQLInstance) -> DomainInstance:
        return DomainInstance(
            id=sql_instance.id,
            job_id=sql_instance.job_id,
            stage_id=sql_instance.stage_id,
            stage_name=sql_instance.stage_name,
            stage_order=sql_instance.stage_order,
            estimated_duration_minutes=sql_instance.estimated_duration_minutes,
            status=StageInstanceStatus(sql_instance.status),
            started_at=(
                as_utc(sql_instance.started_at) if sql_instance.started_at else None
            ),
        )
