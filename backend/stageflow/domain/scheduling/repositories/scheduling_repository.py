"""
Scheduling Repository Interface

Defines the persistence and query collaborator the scheduling services depend on.
Every method is asynchronous; implementations wrap any storage failure in
PersistenceFailureError.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from uuid import UUID

from ..entities.booking import StageBooking
from ..entities.stage import CapacityProfile, Stage
from ..entities.stage_instance import StageInstance


class SchedulingRepository(ABC):
    """
    Abstract repository for stages, capacity profiles, bookings and job routings.

    Stage and profile data are read-only to the scheduler; bookings are only
    written through persist_bookings once a slot has been confirmed.
    """

    @abstractmethod
    async def get_stage(self, stage_id: UUID) -> Stage | None:
        """
        Retrieve a stage by its ID.

        Args:
            stage_id: Unique stage identifier

        Returns:
            Stage entity or None if not found

        Raises:
            PersistenceFailureError: If retrieval fails
        """
        pass

    @abstractmethod
    async def list_stages(self, active_only: bool = True) -> list[Stage]:
        """
        Retrieve stages ordered by their order index.

        Args:
            active_only: Skip stages flagged inactive

        Returns:
            List of stages

        Raises:
            PersistenceFailureError: If retrieval fails
        """
        pass

    @abstractmethod
    async def get_capacity_profile(self, stage_id: UUID) -> CapacityProfile | None:
        """
        Retrieve the capacity profile configured for a stage.

        Args:
            stage_id: Stage identifier

        Returns:
            CapacityProfile or None when the stage uses defaults

        Raises:
            PersistenceFailureError: If retrieval fails
        """
        pass

    @abstractmethod
    async def list_bookings(
        self, stage_id: UUID, start: datetime, end: datetime
    ) -> list[StageBooking]:
        """
        Retrieve committed bookings on a stage overlapping [start, end).

        Args:
            stage_id: Stage identifier
            start: Window start (timezone-aware)
            end: Window end (timezone-aware)

        Returns:
            Bookings of any status overlapping the window, ordered by start

        Raises:
            PersistenceFailureError: If retrieval fails
        """
        pass

    @abstractmethod
    async def list_open_bookings(self, stage_id: UUID) -> list[StageBooking]:
        """
        Retrieve pending and active bookings on a stage.

        Raises:
            PersistenceFailureError: If retrieval fails
        """
        pass

    @abstractmethod
    async def list_stage_instances_for_job(self, job_id: UUID) -> list[StageInstance]:
        """
        Retrieve a job's non-completed stage instances.

        Args:
            job_id: Job identifier

        Returns:
            Stage instances ordered by stage order, completed ones excluded

        Raises:
            PersistenceFailureError: If retrieval fails
        """
        pass

    @abstractmethod
    async def persist_bookings(self, bookings: list[StageBooking]) -> list[StageBooking]:
        """
        Store bookings atomically: either all are written or none.

        Args:
            bookings: Bookings to store (normally the bookings of one job)

        Returns:
            The stored bookings

        Raises:
            PersistenceFailureError: If the write fails
        """
        pass

    @abstractmethod
    async def list_active_stages_overdue(
        self, as_of: datetime, default_duration_minutes: int = 60
    ) -> list[StageInstance]:
        """
        Retrieve active stage instances running past their estimated completion.

        Args:
            as_of: Reference instant (timezone-aware)
            default_duration_minutes: Estimate used when an instance has none

        Returns:
            Overdue active stage instances

        Raises:
            PersistenceFailureError: If retrieval fails
        """
        pass

    @abstractmethod
    async def list_holidays(self) -> list[date]:
        """
        Retrieve configured public holidays.

        Raises:
            PersistenceFailureError: If retrieval fails
        """
        pass
