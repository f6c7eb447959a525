"""
Tests for WorkloadAnalyzer and the queue-day calculation.
"""

from uuid import uuid4

import pytest

from stageflow.domain.scheduling.services import queue_days
from stageflow.domain.scheduling.value_objects import BookingStatus
from stageflow.tests.utils.factories import BookingFactory, StageFactory, sast


@pytest.fixture
def analyzer(services):
    return services.workload_analyzer


class TestQueueDays:
    @pytest.mark.parametrize(
        ("pending", "effective", "expected"),
        [
            (0.0, 8.0, 0),
            (0.5, 8.0, 1),
            (8.0, 8.0, 1),
            (9.0, 8.0, 2),
            (16.0, 8.0, 2),
            (20.4, 6.8, 3),
        ],
    )
    def test_ceiling_semantics(self, pending, effective, expected):
        assert queue_days(pending, effective) == expected

    def test_zero_capacity_with_pending_work(self):
        with pytest.raises(ValueError):
            queue_days(1.0, 0.0)


class TestStageWorkload:
    @pytest.mark.asyncio
    async def test_pending_work_over_a_day(self, analyzer, repository):
        stage = StageFactory.create(repository, capacity_hours=8.0, efficiency=1.0)
        BookingFactory.create(repository, stage.id, sast(2025, 8, 18, 8, 0), 480)
        BookingFactory.create(repository, stage.id, sast(2025, 8, 19, 8, 0), 60)

        snapshot = await analyzer.get_stage_workload(stage.id)

        assert snapshot.total_pending_hours == 9.0
        assert snapshot.pending_job_count == 2
        assert snapshot.queue_days_to_process == 2
        assert snapshot.effective_daily_capacity_hours == 8.0
        assert snapshot.is_bottleneck
        assert snapshot.stage_name == "Printing"

    @pytest.mark.asyncio
    async def test_active_and_completed_work(self, analyzer, repository):
        stage = StageFactory.create(repository)
        job_id = uuid4()
        BookingFactory.create(
            repository,
            stage.id,
            sast(2025, 8, 15, 8, 0),
            120,
            status=BookingStatus.ACTIVE,
            job_id=job_id,
        )
        BookingFactory.create(
            repository,
            stage.id,
            sast(2025, 8, 15, 10, 0),
            60,
            status=BookingStatus.ACTIVE,
            job_id=job_id,
        )
        BookingFactory.create(
            repository,
            stage.id,
            sast(2025, 8, 14, 8, 0),
            240,
            status=BookingStatus.COMPLETED,
        )

        snapshot = await analyzer.get_stage_workload(stage.id)

        assert snapshot.total_active_hours == 3.0
        assert snapshot.active_job_count == 1
        assert snapshot.total_pending_hours == 0.0
        assert snapshot.queue_days_to_process == 0
        assert snapshot.total_open_hours == 3.0
        assert not snapshot.is_bottleneck

    @pytest.mark.asyncio
    async def test_efficiency_scales_capacity(self, analyzer, repository):
        stage = StageFactory.create(repository, capacity_hours=8.0, efficiency=0.5)
        BookingFactory.create(repository, stage.id, sast(2025, 8, 18, 8, 0), 300)

        snapshot = await analyzer.get_stage_workload(stage.id)

        assert snapshot.effective_daily_capacity_hours == 4.0
        assert snapshot.queue_days_to_process == 2

    @pytest.mark.asyncio
    async def test_profile_can_mark_bottleneck(self, analyzer, repository):
        stage = StageFactory.create(repository, is_bottleneck=True)

        snapshot = await analyzer.get_stage_workload(stage.id)

        assert snapshot.queue_days_to_process == 0
        assert snapshot.is_bottleneck


class TestAllWorkloads:
    @pytest.mark.asyncio
    async def test_sorted_by_queue_and_misconfigured_skipped(
        self, analyzer, repository
    ):
        quiet = StageFactory.create(repository, name="Cutting", order_index=0)
        busy = StageFactory.create(repository, name="Printing", order_index=1)
        StageFactory.create(repository, name="Broken", order_index=2, capacity_hours=0.0)
        BookingFactory.create(repository, busy.id, sast(2025, 8, 18, 8, 0), 480)
        BookingFactory.create(repository, busy.id, sast(2025, 8, 19, 8, 0), 480)
        BookingFactory.create(repository, busy.id, sast(2025, 8, 20, 8, 0), 60)

        snapshots = await analyzer.get_all_stage_workloads()

        assert [s.stage_id for s in snapshots] == [busy.id, quiet.id]
        assert snapshots[0].queue_days_to_process == 3

    @pytest.mark.asyncio
    async def test_inactive_stages_ignored(self, analyzer, repository):
        StageFactory.create(repository, is_active=False)

        assert await analyzer.get_all_stage_workloads() == []

    @pytest.mark.asyncio
    async def test_bottlenecks_respect_threshold_and_limit(self, analyzer, repository):
        stages = [
            StageFactory.create(repository, name=f"Stage {i}", order_index=i)
            for i in range(3)
        ]
        # queue days: 2, 3, 1 with the default threshold of 1
        for stage, minutes in zip(stages, [600, 1200, 300], strict=True):
            BookingFactory.create(repository, stage.id, sast(2025, 8, 18, 8, 0), 300)
            if minutes > 300:
                BookingFactory.create(
                    repository, stage.id, sast(2025, 8, 19, 8, 0), minutes - 300
                )

        bottlenecks = await analyzer.get_bottleneck_stages()
        assert [s.stage_id for s in bottlenecks] == [stages[1].id, stages[0].id]

        limited = await analyzer.get_bottleneck_stages(limit=1)
        assert [s.stage_id for s in limited] == [stages[1].id]
