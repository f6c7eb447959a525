"""Scheduling domain entities."""

from .booking import StageBooking
from .stage import CapacityProfile, Stage
from .stage_instance import StageInstance

__all__ = ["CapacityProfile", "Stage", "StageBooking", "StageInstance"]
