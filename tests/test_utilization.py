"""Tests for utilization computation and the per-day cache."""

from datetime import date, datetime

import pytest
from sqlalchemy import func, select

from eventdesk.errors import InsufficientDataError
from eventdesk.models import AuditoriumSchedule, Event, Utilization
from eventdesk.services.time_range import day_range, resolve, RangePolicy
from eventdesk.services.utilization_service import (
    UtilizationService,
    UtilizationSnapshot,
    compute_utilization,
    occupancy_factor,
)
from tests.helpers import StubRedis, UnreachableRedis, create_event, create_schedule


def schedule_for(total_seats: int, available_seats: int, hours: float) -> AuditoriumSchedule:
    start = datetime(2025, 3, 10, 9, 0)
    return AuditoriumSchedule(
        event_id=1,
        booked_by="admin-1",
        start_time=start,
        end_time=start.replace(hour=9 + int(hours)),
        event=Event(total_seats=total_seats, available_seats=available_seats),
    )


async def stored_rows(db) -> list[tuple]:
    result = await db.execute(
        select(
            Utilization.date,
            Utilization.total_hours_used,
            Utilization.utilization_percentage,
            Utilization.event_ids,
        ).order_by(Utilization.date)
    )
    return [tuple(row) for row in result.all()]


async def add_row(db, day: date, percentage: float, hours: float = 6.0) -> None:
    db.add(
        Utilization(
            date=day,
            total_hours_used=hours,
            total_hours_available=24.0,
            event_ids=[],
            utilization_percentage=percentage,
        )
    )
    await db.commit()


@pytest.fixture
def service(db, clock) -> UtilizationService:
    return UtilizationService(db, None, clock)


class TestOccupancyFactor:
    @pytest.mark.parametrize(
        "available, factor",
        [(20, 1.2), (25, 1.1), (50, 1.1), (60, 1.0), (75, 1.0), (80, 0.9), (100, 0.9)],
    )
    def test_thresholds(self, available, factor):
        assert occupancy_factor(schedule_for(100, available, 2)) == factor

    def test_event_without_seats(self):
        assert occupancy_factor(schedule_for(0, 0, 2)) == 1.0


class TestComputeUtilization:
    def test_weighted_percentage(self):
        """Given two 4h bookings of an 80% full event, 9.6 weighted hours of 24."""
        schedules = [schedule_for(100, 20, 4), schedule_for(100, 20, 4)]

        snapshot = compute_utilization(date(2025, 3, 10), schedules, 24.0)

        assert snapshot.total_hours_used == 8.0
        assert snapshot.utilization_percentage == 40.0
        assert snapshot.event_ids == [1]

    def test_capped_at_100(self):
        schedules = [schedule_for(100, 0, 12), schedule_for(100, 0, 12)]
        snapshot = compute_utilization(date(2025, 3, 10), schedules, 24.0)
        assert snapshot.utilization_percentage == 100.0

    def test_no_schedules(self):
        snapshot = compute_utilization(date(2025, 3, 10), [], 24.0)
        assert snapshot.total_hours_used == 0.0
        assert snapshot.utilization_percentage == 0.0


class TestUpsert:
    """Tests for the idempotent cache write."""

    async def test_same_snapshot_twice_keeps_one_row(self, db, service):
        snapshot = UtilizationSnapshot(date(2025, 3, 10), 8.0, 24.0, 40.0, [1])

        assert await service.upsert_utilization_cache(snapshot)
        first = await stored_rows(db)
        assert await service.upsert_utilization_cache(snapshot)

        assert await stored_rows(db) == first
        assert first == [(date(2025, 3, 10), 8.0, 40.0, [1])]

    async def test_recomputed_value_replaces_row(self, db, service):
        await service.upsert_utilization_cache(
            UtilizationSnapshot(date(2025, 3, 10), 8.0, 24.0, 40.0, [1])
        )
        await service.upsert_utilization_cache(
            UtilizationSnapshot(date(2025, 3, 10), 12.0, 24.0, 55.0, [1, 2])
        )

        assert await stored_rows(db) == [(date(2025, 3, 10), 12.0, 55.0, [1, 2])]

    async def test_lock_held_elsewhere_skips_write(self, db, clock):
        redis_client = StubRedis()
        redis_client.store["lock:utilization:2025-03-10"] = "other-worker"
        service = UtilizationService(db, redis_client, clock)

        written = await service.upsert_utilization_cache(
            UtilizationSnapshot(date(2025, 3, 10), 8.0, 24.0, 40.0, [1])
        )

        assert not written
        assert await stored_rows(db) == []

    async def test_lock_is_released_after_write(self, db, clock):
        redis_client = StubRedis()
        service = UtilizationService(db, redis_client, clock)

        written = await service.upsert_utilization_cache(
            UtilizationSnapshot(date(2025, 3, 10), 8.0, 24.0, 40.0, [1])
        )

        assert written
        assert redis_client.store == {}

    async def test_unreachable_redis_writes_without_lock(self, db, clock):
        """Given Redis refuses connections, the row is still written."""
        service = UtilizationService(db, UnreachableRedis(), clock)

        written = await service.upsert_utilization_cache(
            UtilizationSnapshot(date(2025, 3, 10), 8.0, 24.0, 40.0, [1])
        )

        assert written
        assert await stored_rows(db) == [(date(2025, 3, 10), 8.0, 40.0, [1])]


class TestGetUtilization:
    async def test_computes_and_caches_missing_days(self, db, service, clock):
        event = await create_event(db, available_seats=20)
        await create_schedule(db, event, datetime(2025, 3, 10, 9, 0), 6)

        window = resolve("2025-03-09", "2025-03-11", RangePolicy.LAST_30_DAYS, clock)
        records = await service.get_utilization(window)

        assert [record.date for record in records] == [date(2025, 3, 10)]
        assert records[0].utilization_percentage == 30.0
        assert records[0].synthetic is False
        assert await stored_rows(db) == [(date(2025, 3, 10), 6.0, 30.0, [event.event_id])]

        again = await service.get_utilization(window)
        assert again[0].utilization_percentage == 30.0
        assert len(await stored_rows(db)) == 1

    async def test_real_past_value_is_kept(self, db, service):
        await add_row(db, date(2025, 3, 5), 12.5)

        records = await service.get_utilization(day_range(date(2025, 3, 5)))

        assert records[0].utilization_percentage == 12.5
        assert records[0].synthetic is False

    async def test_zero_row_is_backfilled(self, db, service):
        await add_row(db, date(2025, 3, 5), 0.0, hours=0.0)

        records = await service.get_utilization(day_range(date(2025, 3, 5)))

        assert records[0].synthetic is True
        assert 30.0 <= records[0].utilization_percentage <= 79.0
        assert records[0].total_hours_used > 0

    async def test_future_row_is_projected(self, db, service):
        await add_row(db, date(2025, 3, 20), 12.5)

        records = await service.get_utilization(day_range(date(2025, 3, 20)))

        assert records[0].synthetic is True
        assert 30.0 <= records[0].utilization_percentage <= 79.0

    async def test_future_day_reads_the_same_before_and_after_caching(self, db, service):
        """Given a scheduled future day with no row yet, both reads agree."""
        event = await create_event(db, available_seats=20)
        await create_schedule(db, event, datetime(2025, 3, 20, 9, 0), 6)
        window = day_range(date(2025, 3, 20))

        first = await service.get_utilization(window)
        second = await service.get_utilization(window)

        assert first == second
        assert first[0].synthetic is True
        assert 30.0 <= first[0].utilization_percentage <= 79.0
        assert await stored_rows(db) == [(date(2025, 3, 20), 6.0, 30.0, [event.event_id])]

    async def test_unreachable_redis_still_answers(self, db, clock):
        event = await create_event(db, available_seats=20)
        await create_schedule(db, event, datetime(2025, 3, 10, 9, 0), 6)
        service = UtilizationService(db, UnreachableRedis(), clock)

        records = await service.get_utilization(day_range(date(2025, 3, 10)))

        assert records[0].utilization_percentage == 30.0

    async def test_days_without_schedules(self, service, clock):
        window = resolve("2025-03-01", "2025-03-03", RangePolicy.LAST_30_DAYS, clock)

        with pytest.raises(InsufficientDataError):
            await service.get_utilization(window)

        records = await service.get_utilization(window, synthesize_missing=True)
        assert len(records) == 3
        assert all(20.0 <= record.utilization_percentage <= 75.0 for record in records)
        assert all(record.synthetic for record in records)

    async def test_refresh_recent_days(self, db, service):
        event = await create_event(db)
        await create_schedule(db, event, datetime(2025, 3, 11, 18, 0), 3)
        await create_schedule(db, event, datetime(2025, 3, 12, 8, 0), 2)
        await create_schedule(db, event, datetime(2025, 3, 5, 8, 0), 2)

        written = await service.refresh_recent_days(days=2)

        assert written == 2
        assert [row[0] for row in await stored_rows(db)] == [date(2025, 3, 11), date(2025, 3, 12)]
