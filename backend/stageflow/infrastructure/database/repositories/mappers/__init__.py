"""
Domain-SQL entity mappers.
"""

from .booking_mapper import BookingMapper, StageInstanceMapper, as_utc
from .stage_mapper import StageMapper

__all__ = ["BookingMapper", "StageInstanceMapper", "StageMapper", "as_utc"]
