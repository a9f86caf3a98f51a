"""Auditorium utilization: pure computation plus the idempotent cache upsert."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable

import redis.asyncio as redis
from sqlalchemy import func, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from eventdesk.clock import Clock, system_clock
from eventdesk.config import get_settings
from eventdesk.database import execute_with_retry
from eventdesk.distributed_lock import (
    DistributedLockError,
    distributed_lock,
    utilization_lock_key,
)
from eventdesk.errors import InsufficientDataError
from eventdesk.models.auditorium import AuditoriumSchedule, Utilization
from eventdesk.schemas.auditorium import UtilizationRecord
from eventdesk.services.synthetic import (
    UtilizationVariant,
    synthetic_utilization,
    utilization_or_synthetic,
)
from eventdesk.services.time_range import TimeRange, day_range

logger = logging.getLogger(__name__)

settings = get_settings()


def occupancy_factor(schedule: AuditoriumSchedule) -> float:
    """Weight of a schedule's hours by how full the linked event is."""
    event = schedule.event
    if event is None or not event.total_seats:
        return 1.0

    fill_rate = event.fill_rate
    if fill_rate > 0.75:
        return 1.2
    if fill_rate >= 0.5:
        return 1.1
    if fill_rate < 0.25:
        return 0.9
    return 1.0


@dataclass(frozen=True)
class UtilizationSnapshot:
    """Utilization of one day computed from its schedules."""

    day: date
    total_hours_used: float
    total_hours_available: float
    utilization_percentage: float
    event_ids: list[int] = field(default_factory=list)


def compute_utilization(
    day: date,
    schedules: Iterable[AuditoriumSchedule],
    hours_available: float | None = None,
) -> UtilizationSnapshot:
    """
    Compute the utilization of one day.

    Raw usage hours are summed as-is; the percentage uses hours weighted by
    each event's occupancy factor and is capped at 100.
    """
    hours_available = hours_available or settings.AUDITORIUM_HOURS_AVAILABLE
    hours_used = 0.0
    weighted_hours = 0.0
    event_ids: list[int] = []

    for schedule in schedules:
        hours = schedule.usage_hours
        hours_used += hours
        weighted_hours += hours * occupancy_factor(schedule)
        if schedule.event_id not in event_ids:
            event_ids.append(schedule.event_id)

    percentage = min(100.0, weighted_hours / hours_available * 100)

    return UtilizationSnapshot(
        day=day,
        total_hours_used=round(hours_used, 2),
        total_hours_available=hours_available,
        utilization_percentage=round(percentage, 1),
        event_ids=sorted(event_ids),
    )


def schedules_by_day(schedules: Iterable[AuditoriumSchedule]) -> dict[date, list[AuditoriumSchedule]]:
    """Group schedules that start and end on the same day under that day."""
    grouped: dict[date, list[AuditoriumSchedule]] = defaultdict(list)
    for schedule in schedules:
        day = schedule.start_time.date()
        if day_range(day).contains(schedule.end_time):
            grouped[day].append(schedule)
    return grouped


def _backfill(
    dto: UtilizationRecord,
    now: datetime,
    variant: UtilizationVariant,
) -> UtilizationRecord:
    value, synthesized = utilization_or_synthetic(
        dto.utilization_percentage or 0.0, dto.date, now, variant
    )
    if not synthesized:
        return dto

    return dto.model_copy(
        update={
            "utilization_percentage": round(value, 1),
            "total_hours_used": round(value / 100 * dto.total_hours_available, 1),
            "synthetic": True,
        }
    )


def backfilled_record(
    record: Utilization,
    now: datetime,
    variant: UtilizationVariant = UtilizationVariant.RECORDED,
) -> UtilizationRecord:
    """Map a cache row, replacing a zero or future percentage with a synthetic one."""
    return _backfill(UtilizationRecord.from_model(record), now, variant)


def snapshot_record(
    snapshot: UtilizationSnapshot,
    now: datetime,
    variant: UtilizationVariant = UtilizationVariant.RECORDED,
) -> UtilizationRecord:
    """Map a freshly computed snapshot exactly as its cache row will read back."""
    dto = UtilizationRecord(
        date=snapshot.day,
        total_hours_used=snapshot.total_hours_used,
        total_hours_available=snapshot.total_hours_available,
        events=snapshot.event_ids,
        utilization_percentage=snapshot.utilization_percentage,
    )
    return _backfill(dto, now, variant)


def forecast_record(day: date, now: datetime, hours_available: float) -> UtilizationRecord:
    """Value-only record for a day without schedules."""
    value = synthetic_utilization(day, now, UtilizationVariant.FORECAST)
    return UtilizationRecord(
        date=day,
        total_hours_used=round(value / 100 * hours_available, 1),
        total_hours_available=hours_available,
        events=[],
        utilization_percentage=round(value, 1),
        synthetic=True,
    )


class UtilizationService:
    """Service reading and lazily materializing per-day utilization rows."""

    def __init__(
        self,
        db: AsyncSession,
        redis_client: redis.Redis | None = None,
        clock: Clock = system_clock,
    ):
        self.db = db
        self.redis = redis_client
        self.clock = clock

    async def get_records(self, window: TimeRange) -> dict[date, Utilization]:
        """Persisted cache rows in the window, keyed by day."""
        result = await execute_with_retry(
            self.db,
            select(Utilization)
            .where(
                Utilization.date >= window.start_date,
                Utilization.date <= window.end_date,
            )
            .order_by(Utilization.date),
        )
        return {record.date: record for record in result.scalars().all()}

    async def get_schedules(self, window: TimeRange) -> list[AuditoriumSchedule]:
        """Schedules fully inside the window, with their events loaded."""
        result = await execute_with_retry(
            self.db,
            select(AuditoriumSchedule)
            .options(joinedload(AuditoriumSchedule.event))
            .where(
                AuditoriumSchedule.start_time >= window.start,
                AuditoriumSchedule.end_time <= window.end,
            )
            .order_by(AuditoriumSchedule.start_time),
        )
        return list(result.scalars().all())

    def _upsert_statement(self, snapshot: UtilizationSnapshot):
        values = {
            "date": snapshot.day,
            "total_hours_used": snapshot.total_hours_used,
            "total_hours_available": snapshot.total_hours_available,
            "event_ids": snapshot.event_ids,
            "utilization_percentage": snapshot.utilization_percentage,
        }
        updates = {key: value for key, value in values.items() if key != "date"}
        updates["updated_at"] = func.current_timestamp()
        dialect = self.db.get_bind().dialect.name

        if dialect == "mysql":
            stmt = mysql.insert(Utilization).values(**values)
            return stmt.on_duplicate_key_update(**updates)
        if dialect == "postgresql":
            stmt = postgresql.insert(Utilization).values(**values)
            return stmt.on_conflict_do_update(index_elements=["date"], set_=updates)
        stmt = sqlite.insert(Utilization).values(**values)
        return stmt.on_conflict_do_update(index_elements=["date"], set_=updates)

    async def upsert_utilization_cache(self, snapshot: UtilizationSnapshot) -> bool:
        """
        Write a snapshot to the cache, keyed by its day.

        Recomputing the same day from unchanged schedules converges to the
        same row. When Redis is enabled a per-day lock keeps concurrent
        requests from racing; if another worker holds it the write is skipped.
        If Redis cannot be reached the row is written without the lock.

        Returns:
            True if the row was written.
        """
        if self.redis is None:
            await self._write_snapshot(snapshot)
            return True

        written = False
        try:
            async with distributed_lock(
                self.redis,
                utilization_lock_key(snapshot.day),
                blocking=False,
            ):
                await self._write_snapshot(snapshot)
                written = True
        except DistributedLockError:
            logger.info(
                f"Utilization for {snapshot.day.isoformat()} is being written elsewhere"
            )
            return False
        except redis.RedisError as e:
            logger.warning(
                f"Redis unavailable for utilization lock on {snapshot.day.isoformat()}: {e}"
            )
            if not written:
                await self._write_snapshot(snapshot)
                written = True
        return written

    async def _write_snapshot(self, snapshot: UtilizationSnapshot) -> None:
        await execute_with_retry(self.db, self._upsert_statement(snapshot))
        await self.db.commit()
        logger.info(
            f"Cached utilization for {snapshot.day.isoformat()}: "
            f"{snapshot.utilization_percentage}%"
        )

    async def get_utilization(
        self,
        window: TimeRange,
        synthesize_missing: bool = False,
    ) -> list[UtilizationRecord]:
        """
        Per-day utilization for the window, oldest first.

        Days with a cache row use it (backfilled when zero or in the future).
        Other days are computed from their schedules and written to the cache;
        days without schedules are skipped, or reported as value-only synthetic
        records when ``synthesize_missing`` is set.

        Raises:
            InsufficientDataError: If no day produced a record.
        """
        now = self.clock.now()
        records = await self.get_records(window)
        schedules = schedules_by_day(await self.get_schedules(window))

        results: list[UtilizationRecord] = []
        for day in window.days():
            record = records.get(day)
            if record is not None:
                results.append(backfilled_record(record, now))
                continue

            day_schedules = schedules.get(day)
            if day_schedules:
                snapshot = compute_utilization(day, day_schedules)
                await self.upsert_utilization_cache(snapshot)
                results.append(snapshot_record(snapshot, now))
            elif synthesize_missing:
                results.append(
                    forecast_record(day, now, settings.AUDITORIUM_HOURS_AVAILABLE)
                )

        if not results:
            raise InsufficientDataError()

        return results

    async def refresh_recent_days(self, days: int = 2) -> int:
        """
        Recompute and cache the utilization of the last ``days`` days.

        Returns:
            Number of rows written.
        """
        today = self.clock.today()
        window = TimeRange(
            day_range(today - timedelta(days=days - 1)).start,
            day_range(today).end,
        )
        schedules = schedules_by_day(await self.get_schedules(window))

        written = 0
        for day in window.days():
            day_schedules = schedules.get(day)
            if not day_schedules:
                continue
            if await self.upsert_utilization_cache(compute_utilization(day, day_schedules)):
                written += 1
        return written
