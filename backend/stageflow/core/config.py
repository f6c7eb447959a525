"""
Scheduler Configuration

Environment-driven settings (pydantic-settings) and the frozen SchedulerConfig
value handed to every scheduling service. There is no module-level settings
instance; the composition root loads settings once and passes the resulting
config explicitly.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import date, time
from typing import Annotated, Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BeforeValidator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.scheduling.value_objects.business_calendar import (
    BusinessHours,
    WorkingCalendar,
)


def parse_list(v: Any) -> list[Any] | Any:
    """Accept comma separated env values as well as JSON lists."""
    if isinstance(v, str):
        stripped = v.strip()
        if not stripped:
            return []
        if stripped.startswith("["):
            return json.loads(stripped)
        return [item.strip() for item in stripped.split(",")]
    return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "stageflow"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"
    LOG_SQL: bool = False

    # Business calendar
    BUSINESS_TIMEZONE: str = "Africa/Johannesburg"
    WORKING_DAY_START: str = "08:00"
    WORKING_DAY_END: str = "17:30"
    WORKING_WEEKDAYS: Annotated[list[int] | str, BeforeValidator(parse_list)] = [
        0,
        1,
        2,
        3,
        4,
    ]
    PUBLIC_HOLIDAYS: Annotated[list[date] | str, BeforeValidator(parse_list)] = []

    # Capacity defaults
    DEFAULT_DAILY_CAPACITY_HOURS: float = 8.5
    DEFAULT_EFFICIENCY_FACTOR: float = 0.85
    SLOT_SEARCH_HORIZON_DAYS: int = 60
    WORKING_DAY_HOURS: float = 8.0
    BOTTLENECK_QUEUE_DAYS_THRESHOLD: int = 1
    DUE_DATE_BUFFER_DAYS: int = 1
    DEFAULT_STAGE_DURATION_MINUTES: int = 60

    DATABASE_URL: str = "sqlite+aiosqlite:///./stageflow.db"


def load_settings(**overrides: Any) -> Settings:
    """Read settings from the environment (and .env), applying explicit overrides."""
    return Settings(**overrides)


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Immutable scheduling configuration.

    Built once at startup from Settings; ``reload()`` produces a fresh instance
    instead of mutating this one.
    """

    timezone: str = "Africa/Johannesburg"
    working_hours: BusinessHours = field(
        default_factory=lambda: BusinessHours(time(8, 0), time(17, 30))
    )
    calendar: WorkingCalendar = field(default_factory=WorkingCalendar.standard_calendar)
    default_daily_capacity_hours: float = 8.5
    default_efficiency_factor: float = 0.85
    horizon_days: int = 60
    working_day_hours: float = 8.0
    bottleneck_queue_days_threshold: int = 1
    due_date_buffer_days: int = 1
    default_stage_duration_minutes: int = 60

    def __post_init__(self):
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {self.timezone}") from e
        if self.default_daily_capacity_hours <= 0:
            raise ValueError("Default daily capacity must be positive")
        if not 0 < self.default_efficiency_factor <= 1:
            raise ValueError("Default efficiency factor must be in (0, 1]")
        if self.horizon_days <= 0:
            raise ValueError("Slot search horizon must be positive")
        if self.working_day_hours <= 0:
            raise ValueError("Working day hours must be positive")
        if self.bottleneck_queue_days_threshold < 0:
            raise ValueError("Bottleneck threshold cannot be negative")
        if self.due_date_buffer_days < 0:
            raise ValueError("Due date buffer cannot be negative")
        if self.default_stage_duration_minutes <= 0:
            raise ValueError("Default stage duration must be positive")

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def working_day_minutes(self) -> int:
        return int(round(self.working_day_hours * 60))

    @classmethod
    def from_settings(cls, settings: Settings) -> SchedulerConfig:
        """Translate raw settings into a validated config value."""
        return cls(
            timezone=settings.BUSINESS_TIMEZONE,
            working_hours=BusinessHours.parse(
                settings.WORKING_DAY_START, settings.WORKING_DAY_END
            ),
            calendar=WorkingCalendar(
                frozenset(settings.WORKING_WEEKDAYS),
                frozenset(settings.PUBLIC_HOLIDAYS),
            ),
            default_daily_capacity_hours=settings.DEFAULT_DAILY_CAPACITY_HOURS,
            default_efficiency_factor=settings.DEFAULT_EFFICIENCY_FACTOR,
            horizon_days=settings.SLOT_SEARCH_HORIZON_DAYS,
            working_day_hours=settings.WORKING_DAY_HOURS,
            bottleneck_queue_days_threshold=settings.BOTTLENECK_QUEUE_DAYS_THRESHOLD,
            due_date_buffer_days=settings.DUE_DATE_BUFFER_DAYS,
            default_stage_duration_minutes=settings.DEFAULT_STAGE_DURATION_MINUTES,
        )

    @classmethod
    def reload(cls, **overrides: Any) -> SchedulerConfig:
        """Build a new config from a fresh read of the environment."""
        return cls.from_settings(load_settings(**overrides))

    def with_holidays(self, holidays: list[date]) -> SchedulerConfig:
        """Return a copy whose calendar also excludes the given holidays."""
        return replace(self, calendar=self.calendar.with_holidays(holidays))
