"""
Unit tests for SlotFinder.

Stages are seeded with 8 hours (480 minutes) of daily capacity and the default
08:00-17:30 SAST window. Friday is 15 August 2025.
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from stageflow.domain.scheduling.services import AllocationOverlay
from stageflow.domain.scheduling.value_objects import BookingStatus, TimeInterval
from stageflow.domain.shared.exceptions import (
    InvalidStageConfigurationError,
    ValidationError,
)
from stageflow.tests.utils.factories import BookingFactory, StageFactory, sast, utc


@pytest.fixture
def stage(repository):
    return StageFactory.create(repository, capacity_hours=8.0)


@pytest.fixture
def slot_finder(services):
    return services.slot_finder


class TestFindSlot:
    @pytest.mark.asyncio
    async def test_friday_afternoon_slot_when_free(self, slot_finder, stage):
        """Friday 16:00 + 90 minutes ends exactly at the 17:30 window end."""
        start = await slot_finder.find_slot(stage.id, 90, utc(sast(2025, 8, 15, 16)))

        assert start == sast(2025, 8, 15, 16, 0)

    @pytest.mark.asyncio
    async def test_friday_afternoon_blocked_moves_to_monday(
        self, slot_finder, stage, repository
    ):
        BookingFactory.create(repository, stage.id, sast(2025, 8, 15, 16, 30), 30)

        start = await slot_finder.find_slot(stage.id, 90, utc(sast(2025, 8, 15, 16)))

        assert start == sast(2025, 8, 18, 8, 0)

    @pytest.mark.asyncio
    async def test_friday_capacity_precheck_moves_to_monday(
        self, slot_finder, stage, repository
    ):
        """420 minutes booked leaves too little capacity, even though 16:00-17:30 is free."""
        BookingFactory.create(repository, stage.id, sast(2025, 8, 15, 8, 0), 420)

        start = await slot_finder.find_slot(stage.id, 90, utc(sast(2025, 8, 15, 16)))

        assert start == sast(2025, 8, 18, 8, 0)

    @pytest.mark.asyncio
    async def test_overflow_rolls_to_next_working_day(
        self, slot_finder, stage, repository
    ):
        BookingFactory.create(repository, stage.id, sast(2025, 8, 18, 8, 0), 300)

        start = await slot_finder.find_slot(stage.id, 240, utc(sast(2025, 8, 18, 8)))

        assert start == sast(2025, 8, 19, 8, 0)

    @pytest.mark.asyncio
    async def test_saturday_request_lands_on_monday(self, slot_finder, stage):
        start = await slot_finder.find_slot(stage.id, 60, utc(sast(2025, 8, 16, 10)))

        assert start == sast(2025, 8, 18, 8, 0)

    @pytest.mark.asyncio
    async def test_first_gap_after_existing_bookings(
        self, slot_finder, stage, repository
    ):
        BookingFactory.create(repository, stage.id, sast(2025, 8, 18, 8, 0), 60)
        BookingFactory.create(repository, stage.id, sast(2025, 8, 18, 9, 30), 60)

        start = await slot_finder.find_slot(stage.id, 45, utc(sast(2025, 8, 18, 8)))
        assert start == sast(2025, 8, 18, 10, 30)

        start = await slot_finder.find_slot(stage.id, 30, utc(sast(2025, 8, 18, 8)))
        assert start == sast(2025, 8, 18, 9, 0)

    @pytest.mark.asyncio
    async def test_completed_bookings_still_occupy_time(
        self, slot_finder, stage, repository
    ):
        BookingFactory.create(
            repository,
            stage.id,
            sast(2025, 8, 18, 8, 0),
            120,
            status=BookingStatus.COMPLETED,
        )

        start = await slot_finder.find_slot(stage.id, 60, utc(sast(2025, 8, 18, 8)))
        assert start == sast(2025, 8, 18, 10, 0)

    @pytest.mark.asyncio
    async def test_overlay_reservations_are_respected(self, slot_finder, stage):
        overlay = AllocationOverlay()
        overlay.reserve(
            stage.id,
            uuid4(),
            TimeInterval(sast(2025, 8, 18, 8, 0), sast(2025, 8, 18, 10, 0)),
        )

        start = await slot_finder.find_slot(
            stage.id, 60, utc(sast(2025, 8, 18, 8)), overlay=overlay
        )

        assert start == sast(2025, 8, 18, 10, 0)

    @pytest.mark.asyncio
    async def test_finding_a_slot_does_not_reserve_it(self, slot_finder, stage):
        overlay = AllocationOverlay()
        await slot_finder.find_slot(stage.id, 60, utc(sast(2025, 8, 18, 8)), overlay=overlay)
        assert len(overlay) == 0


class TestNotFound:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("horizon", [1, 5, 60])
    async def test_duration_above_daily_capacity_never_fits(
        self, slot_finder, stage, horizon
    ):
        start = await slot_finder.find_slot(
            stage.id, 481, utc(sast(2025, 8, 18, 8)), horizon_days=horizon
        )
        assert start is None

    @pytest.mark.asyncio
    async def test_duration_above_window_length_never_fits(self, slot_finder, repository):
        """A 10 hour capacity cannot help inside a 570 minute window."""
        stage = StageFactory.create(repository, capacity_hours=10.0)

        start = await slot_finder.find_slot(stage.id, 600, utc(sast(2025, 8, 18, 8)))

        assert start is None

    @pytest.mark.asyncio
    async def test_horizon_exhausted(self, slot_finder, stage, repository):
        """Monday and Tuesday are full; a two day horizon finds nothing."""
        BookingFactory.create(repository, stage.id, sast(2025, 8, 18, 8, 0), 480)
        BookingFactory.create(repository, stage.id, sast(2025, 8, 19, 8, 0), 480)

        start = await slot_finder.find_slot(
            stage.id, 60, utc(sast(2025, 8, 18, 8)), horizon_days=2
        )
        assert start is None

        start = await slot_finder.find_slot(
            stage.id, 60, utc(sast(2025, 8, 18, 8)), horizon_days=3
        )
        assert start == sast(2025, 8, 20, 8, 0)


class TestSearchDetails:
    @pytest.mark.asyncio
    async def test_search_reports_capacity(self, slot_finder, stage, repository):
        BookingFactory.create(repository, stage.id, sast(2025, 8, 18, 8, 0), 120)

        result = await slot_finder.search(stage.id, 60, utc(sast(2025, 8, 18, 8)))

        assert result.start == sast(2025, 8, 18, 10, 0)
        assert result.end == sast(2025, 8, 18, 11, 0)
        assert result.capacity_date.isoformat() == "2025-08-18"
        assert result.booked_minutes == 120
        assert result.capacity_minutes == 480
        assert result.duration_minutes == 60


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("duration", [0, -15])
    async def test_non_positive_duration_rejected(self, slot_finder, stage, duration):
        with pytest.raises(ValidationError):
            await slot_finder.find_slot(stage.id, duration, utc(sast(2025, 8, 18, 8)))

    @pytest.mark.asyncio
    async def test_naive_earliest_rejected(self, slot_finder, stage):
        with pytest.raises(ValidationError):
            await slot_finder.find_slot(stage.id, 60, datetime(2025, 8, 18, 8, 0))

    @pytest.mark.asyncio
    async def test_missing_stage(self, slot_finder):
        with pytest.raises(InvalidStageConfigurationError):
            await slot_finder.find_slot(
                uuid4(), 60, datetime(2025, 8, 18, 6, 0, tzinfo=timezone.utc)
            )

    @pytest.mark.asyncio
    async def test_zero_capacity_stage(self, slot_finder, repository):
        stage = StageFactory.create(repository, capacity_hours=0.0)

        with pytest.raises(InvalidStageConfigurationError, match="zero"):
            await slot_finder.find_slot(stage.id, 60, utc(sast(2025, 8, 18, 8)))
