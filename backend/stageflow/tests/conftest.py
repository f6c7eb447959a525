import pytest

from stageflow.application.composition import (
    SchedulingServices,
    wire_scheduling_services,
)
from stageflow.core.config import SchedulerConfig
from stageflow.infrastructure.persistence import InMemorySchedulingRepository
from stageflow.tests.utils.factories import fixed_clock


@pytest.fixture
def config() -> SchedulerConfig:
    """Default SAST calendar: Mon-Fri, 08:00-17:30, 60 working day horizon."""
    return SchedulerConfig()


@pytest.fixture
def repository() -> InMemorySchedulingRepository:
    return InMemorySchedulingRepository()


@pytest.fixture
def services(
    repository: InMemorySchedulingRepository, config: SchedulerConfig
) -> SchedulingServices:
    return wire_scheduling_services(repository, config, clock=fixed_clock())
