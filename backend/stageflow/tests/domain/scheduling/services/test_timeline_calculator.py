"""
Tests for job timeline projection.

Most scenarios start on Monday 18 August 2025 08:00 SAST.
"""

from uuid import uuid4

import pytest

from stageflow.domain.scheduling.value_objects import StageInstanceStatus
from stageflow.domain.shared.exceptions import InvalidStageConfigurationError
from stageflow.tests.utils.factories import (
    BookingFactory,
    StageFactory,
    StageInstanceFactory,
    sast,
    utc,
)

MONDAY_8 = utc(sast(2025, 8, 18, 8, 0))


@pytest.fixture
def calculator(services):
    return services.timeline_calculator


@pytest.fixture
def printing(repository):
    return StageFactory.create(repository, name="Printing", order_index=0)


@pytest.fixture
def binding(repository):
    return StageFactory.create(repository, name="Binding", order_index=1)


class TestStageChaining:
    @pytest.mark.asyncio
    async def test_stages_follow_each_other(
        self, calculator, repository, printing, binding
    ):
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=120)
        StageInstanceFactory.create(repository, job_id, binding, 1, minutes=60)

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        assert [s.stage_name for s in timeline.stages] == ["Printing", "Binding"]
        assert timeline.stages[0].start_time == utc(sast(2025, 8, 18, 8, 0))
        assert timeline.stages[0].end_time == utc(sast(2025, 8, 18, 10, 0))
        assert timeline.stages[1].start_time == utc(sast(2025, 8, 18, 10, 0))
        assert timeline.stages[1].end_time == utc(sast(2025, 8, 18, 11, 0))
        assert timeline.estimated_completion == utc(sast(2025, 8, 18, 11, 0))
        assert timeline.total_working_days == 1
        assert timeline.total_calendar_days == 1
        assert timeline.bottleneck_stage_id is None
        assert timeline.critical_path == []

    @pytest.mark.asyncio
    async def test_stage_order_not_insertion_order(
        self, calculator, repository, printing, binding
    ):
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, binding, 1, minutes=60)
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=60)

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        assert [s.stage_order for s in timeline.stages] == [0, 1]

    @pytest.mark.asyncio
    async def test_friday_overflow_moves_to_monday(self, calculator, repository, printing):
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=120)

        timeline = await calculator.calculate_timeline(
            job_id, now=utc(sast(2025, 8, 15, 16, 0))
        )

        assert timeline.stages[0].start_time == utc(sast(2025, 8, 18, 8, 0))
        assert timeline.total_working_days == 1
        assert timeline.total_calendar_days == 3

    @pytest.mark.asyncio
    async def test_existing_bookings_delay_stages(
        self, calculator, repository, printing, binding
    ):
        BookingFactory.create(repository, binding.id, sast(2025, 8, 18, 8, 0), 240)
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=60)
        StageInstanceFactory.create(repository, job_id, binding, 1, minutes=60)

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        assert timeline.stages[1].start_time == utc(sast(2025, 8, 18, 12, 0))

    @pytest.mark.asyncio
    async def test_repeated_stage_uses_timeline_overlay(
        self, calculator, repository, printing
    ):
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=120)
        StageInstanceFactory.create(repository, job_id, printing, 1, minutes=120)

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        assert timeline.stages[1].start_time == utc(sast(2025, 8, 18, 10, 0))
        assert repository.bookings == []

    @pytest.mark.asyncio
    async def test_starts_are_monotonic(self, calculator, repository):
        job_id = uuid4()
        for order in range(4):
            stage = StageFactory.create(
                repository, name=f"Stage {order}", order_index=order
            )
            StageInstanceFactory.create(repository, job_id, stage, order, minutes=200)

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        for previous, current in zip(
            timeline.stages, timeline.stages[1:], strict=False
        ):
            assert current.start_time >= previous.end_time
        assert timeline.total_working_days == 2


class TestDurations:
    @pytest.mark.asyncio
    async def test_unknown_duration_uses_default(self, calculator, repository, printing):
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=None)

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        assert timeline.stages[0].duration_minutes == 60
        assert timeline.stages[0].end_time == utc(sast(2025, 8, 18, 9, 0))

    @pytest.mark.asyncio
    async def test_oversize_stage_spreads_over_windows(
        self, calculator, repository, printing
    ):
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=600)

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        stage = timeline.stages[0]
        assert not stage.placed_in_slot
        assert stage.start_time == utc(sast(2025, 8, 18, 8, 0))
        assert stage.end_time == utc(sast(2025, 8, 19, 8, 30))
        assert timeline.total_working_days == 2

    @pytest.mark.asyncio
    async def test_oversize_stage_waits_for_queue(self, calculator, repository, printing):
        BookingFactory.create(repository, printing.id, sast(2025, 8, 18, 8, 0), 480)
        BookingFactory.create(repository, printing.id, sast(2025, 8, 19, 8, 0), 60)
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=600)

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        stage = timeline.stages[0]
        assert stage.queue_days_to_process == 2
        assert stage.start_time == utc(sast(2025, 8, 20, 8, 0))
        assert stage.end_time == utc(sast(2025, 8, 21, 8, 30))


class TestSummary:
    @pytest.mark.asyncio
    async def test_bottleneck_and_critical_path(
        self, calculator, repository, printing, binding
    ):
        for day in (18, 19):
            BookingFactory.create(repository, binding.id, sast(2025, 8, day, 8, 0), 480)
        BookingFactory.create(repository, binding.id, sast(2025, 8, 20, 8, 0), 60)
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=60)
        StageInstanceFactory.create(repository, job_id, binding, 1, minutes=60)

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        assert timeline.bottleneck_stage_id == binding.id
        assert timeline.bottleneck_stage_name == "Binding"
        assert timeline.critical_path == ["Binding"]
        assert timeline.stages[1].start_time == utc(sast(2025, 8, 20, 9, 0))

    @pytest.mark.asyncio
    async def test_job_without_open_stages(self, calculator, repository, printing):
        job_id = uuid4()
        StageInstanceFactory.create(
            repository, job_id, printing, 0, status=StageInstanceStatus.COMPLETED
        )

        timeline = await calculator.calculate_timeline(job_id, now=MONDAY_8)

        assert timeline.stages == []
        assert timeline.estimated_completion is None
        assert timeline.total_working_days == 0
        assert timeline.total_calendar_days == 0
        assert timeline.bottleneck_stage_id is None

    @pytest.mark.asyncio
    async def test_clock_used_when_now_omitted(self, calculator, repository, printing):
        job_id = uuid4()
        StageInstanceFactory.create(repository, job_id, printing, 0, minutes=60)

        timeline = await calculator.calculate_timeline(job_id)

        # Fixed clock: Friday 06:00, so the first slot opens at 08:00
        assert timeline.calculated_at == utc(sast(2025, 8, 15, 6, 0))
        assert timeline.stages[0].start_time == utc(sast(2025, 8, 15, 8, 0))

    @pytest.mark.asyncio
    async def test_missing_stage_on_route(self, calculator, repository, printing):
        job_id = uuid4()
        orphan = printing.model_copy(update={"id": uuid4()})
        StageInstanceFactory.create(repository, job_id, orphan, 0)

        with pytest.raises(InvalidStageConfigurationError):
            await calculator.calculate_timeline(job_id, now=MONDAY_8)
