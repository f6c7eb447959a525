"""
Observability Infrastructure

Structured logging (structlog) and Prometheus metrics for the scheduling core.
Metrics are only recorded here; exposing them is left to the HTTP wrapper.
"""

import functools
import logging
import sys
import time
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from prometheus_client import Counter, Histogram

from .config import Settings

F = TypeVar("F", bound=Callable[..., Any])

# Prometheus metrics
SCHEDULER_OPERATIONS = Counter(
    "stageflow_scheduler_operations_total",
    "Total scheduler operations",
    ["operation_type", "status"],
)

SCHEDULER_DURATION = Histogram(
    "stageflow_scheduler_operation_duration_seconds",
    "Scheduler operation duration",
    ["operation_type"],
)

SLOT_SEARCHES = Counter(
    "stageflow_slot_searches_total",
    "Slot searches by outcome",
    ["outcome"],
)

CAPACITY_FALLBACKS = Counter(
    "stageflow_capacity_fallbacks_total",
    "Stage capacity lookups answered with configured defaults",
    ["reason"],
)


def setup_structured_logging(settings: Settings) -> None:
    """Configure structured logging with JSON or console output."""

    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    if settings.LOG_SQL:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    else:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def monitor_performance(operation_type: str):
    """Decorator recording duration and outcome of an async scheduler operation."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__)
            start_time = time.perf_counter()

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                SCHEDULER_OPERATIONS.labels(
                    operation_type=operation_type, status="error"
                ).inc()
                logger.error(
                    "Operation failed",
                    operation=operation_type,
                    function=func.__name__,
                    duration_seconds=duration,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            duration = time.perf_counter() - start_time
            SCHEDULER_OPERATIONS.labels(
                operation_type=operation_type, status="success"
            ).inc()
            SCHEDULER_DURATION.labels(operation_type=operation_type).observe(duration)
            logger.debug(
                "Operation completed",
                operation=operation_type,
                function=func.__name__,
                duration_seconds=duration,
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
