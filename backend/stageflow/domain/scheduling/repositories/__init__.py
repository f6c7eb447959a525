"""Repository interfaces for the scheduling domain."""

from .scheduling_repository import SchedulingRepository

__all__ = ["SchedulingRepository"]
