"""Shared domain building blocks."""

from .exceptions import (
    BatchPersistenceError,
    DomainError,
    ErrorType,
    InvalidStageConfigurationError,
    NoCapacityFoundError,
    PersistenceFailureError,
    ValidationError,
)

__all__ = [
    "BatchPersistenceError",
    "DomainError",
    "ErrorType",
    "InvalidStageConfigurationError",
    "NoCapacityFoundError",
    "PersistenceFailureError",
    "ValidationError",
]
