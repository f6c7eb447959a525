"""
Read models for scheduling projections.

These models are derived on demand from bookings and stage data and are never
persisted authoritatively.
"""

from .capacity_impact import CapacityImpactReport, NewWorkItem, StageImpact
from .due_date import DueDateEstimate, DueDateWarning, OverdueStage
from .timeline import JobTimeline, TimelineStage
from .workload import WorkloadSnapshot

__all__ = [
    "CapacityImpactReport",
    "DueDateEstimate",
    "DueDateWarning",
    "JobTimeline",
    "NewWorkItem",
    "OverdueStage",
    "StageImpact",
    "TimelineStage",
    "WorkloadSnapshot",
]
