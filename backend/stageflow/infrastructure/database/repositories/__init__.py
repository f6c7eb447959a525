"""
Repository implementations for the scheduling domain.
"""

from .scheduling_repository import SQLModelSchedulingRepository

__all__ = ["SQLModelSchedulingRepository"]
