"""
Domain Exceptions

Defines the error taxonomy for stage capacity scheduling. Every error carries a
discriminating ErrorType so callers (batch results, the HTTP wrapper) can report
failures without inspecting exception classes.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:  # pragma: no cover - only for type checking
    from ..scheduling.services.capacity_scheduler import BatchScheduleResult


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    NO_CAPACITY = "no_capacity"
    STAGE_CONFIGURATION = "stage_configuration"
    PERSISTENCE = "persistence"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when scheduling input fails validation."""

    def __init__(
        self,
        field_name: str,
        value: Any,
        message: str,
        error_code: str | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        super().__init__(
            f"Validation failed for field '{field_name}': {message}",
            ErrorType.VALIDATION,
            {
                "field": field_name,
                "value": str(value) if value is not None else None,
                "error_code": self.error_code,
            },
        )


class NoCapacityFoundError(DomainError):
    """Raised when no slot fits a stage's capacity within the search horizon."""

    def __init__(self, stage_id: UUID, duration_minutes: int, horizon_days: int) -> None:
        self.stage_id = stage_id
        self.duration_minutes = duration_minutes
        self.horizon_days = horizon_days
        super().__init__(
            f"No capacity found on stage {stage_id} for {duration_minutes} minutes "
            f"within {horizon_days} working days",
            ErrorType.NO_CAPACITY,
            {
                "stage_id": str(stage_id),
                "duration_minutes": duration_minutes,
                "horizon_days": horizon_days,
            },
        )


class InvalidStageConfigurationError(DomainError):
    """Raised when a stage is missing or cannot provide any capacity."""

    def __init__(self, stage_id: UUID, reason: str) -> None:
        self.stage_id = stage_id
        self.reason = reason
        super().__init__(
            f"Stage {stage_id} is misconfigured: {reason}",
            ErrorType.STAGE_CONFIGURATION,
            {"stage_id": str(stage_id), "reason": reason},
        )


class PersistenceFailureError(DomainError):
    """Raised by repositories when the backing store fails."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(
            f"Persistence failure during {operation}: {message}",
            ErrorType.PERSISTENCE,
            {"operation": operation},
        )


class BatchPersistenceError(PersistenceFailureError):
    """
    Raised after a batch was scheduled in memory but some jobs failed to persist.

    The complete in-memory result travels with the error so the caller can retry
    only the failed jobs.
    """

    def __init__(
        self, result: BatchScheduleResult, failed_jobs: dict[UUID, str]
    ) -> None:
        self.result = result
        self.failed_jobs = failed_jobs
        super().__init__(
            "persist_bookings",
            f"{len(failed_jobs)} job(s) could not be persisted",
        )
        self.details["failed_job_ids"] = [str(job_id) for job_id in failed_jobs]
