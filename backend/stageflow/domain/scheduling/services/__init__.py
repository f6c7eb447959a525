"""Domain services for stage capacity scheduling."""

from .allocation_overlay import AllocationOverlay, Reservation
from .bottleneck_detector import BottleneckDetector, CapacityImpactEstimator
from .capacity_profiles import CapacityProfileResolver, StageCapacity
from .capacity_scheduler import (
    BatchScheduleResult,
    CapacityScheduler,
    CapacityUsage,
    ScheduledSlot,
    ScheduleRequest,
    SchedulingFailure,
)
from .due_date_service import DueDateService, calculate_warning_level
from .slot_finder import SlotFinder, SlotSearchResult
from .time_converter import TimeConverter
from .timeline_calculator import TimelineCalculator
from .workload_analyzer import WorkloadAnalyzer, queue_days

__all__ = [
    "AllocationOverlay",
    "BatchScheduleResult",
    "BottleneckDetector",
    "CapacityImpactEstimator",
    "CapacityProfileResolver",
    "CapacityScheduler",
    "CapacityUsage",
    "DueDateService",
    "Reservation",
    "ScheduleRequest",
    "ScheduledSlot",
    "SchedulingFailure",
    "SlotFinder",
    "SlotSearchResult",
    "StageCapacity",
    "TimeConverter",
    "TimelineCalculator",
    "WorkloadAnalyzer",
    "calculate_warning_level",
    "queue_days",
]
