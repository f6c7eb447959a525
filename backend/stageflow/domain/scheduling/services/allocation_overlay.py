"""
Allocation Overlay

Batch-scoped reservations keyed by (stage, local date). A slot reserved for one
request is visible to every later search in the same batch before anything is
persisted. One overlay belongs to exactly one batch call.
"""

from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from ..entities.booking import StageBooking
from ..value_objects.time_window import TimeInterval
from .time_converter import TimeConverter


@dataclass(frozen=True)
class Reservation:
    """A provisional interval (local time) held for a job on a stage."""

    job_id: UUID
    stage_id: UUID
    interval: TimeInterval

    @property
    def duration_minutes(self) -> int:
        return self.interval.duration_minutes


class AllocationOverlay:
    def __init__(self) -> None:
        self._reservations: dict[tuple[UUID, date], list[Reservation]] = defaultdict(
            list
        )

    def reserve(self, stage_id: UUID, job_id: UUID, interval: TimeInterval) -> Reservation:
        """
        Hold an interval on a stage.

        Args:
            stage_id: Stage the interval belongs to
            job_id: Job the interval is reserved for
            interval: Local-time interval, keyed by its start date

        Returns:
            The stored reservation
        """
        reservation = Reservation(job_id=job_id, stage_id=stage_id, interval=interval)
        key = (stage_id, interval.start.date())
        self._reservations[key].append(reservation)
        self._reservations[key].sort(key=lambda r: r.interval.start)
        return reservation

    def intervals_for(self, stage_id: UUID, local_date: date) -> list[TimeInterval]:
        """Reserved intervals for a stage and date, ordered by start."""
        return [r.interval for r in self._reservations.get((stage_id, local_date), [])]

    def booked_minutes(self, stage_id: UUID, local_date: date) -> int:
        return sum(
            r.duration_minutes for r in self._reservations.get((stage_id, local_date), [])
        )

    def reservations(self) -> Iterator[Reservation]:
        for key in sorted(self._reservations, key=lambda k: (str(k[0]), k[1])):
            yield from self._reservations[key]

    def to_bookings(self, converter: TimeConverter) -> list[StageBooking]:
        """Turn every reservation into a pending booking with absolute times."""
        return [
            StageBooking.create(
                job_id=r.job_id,
                stage_id=r.stage_id,
                start_time=converter.to_absolute(r.interval.start),
                duration_minutes=r.duration_minutes,
            )
            for r in self.reservations()
        ]

    def __len__(self) -> int:
        return sum(len(items) for items in self._reservations.values())
