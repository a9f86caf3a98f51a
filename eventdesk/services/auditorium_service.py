"""Auditorium schedule and events-held queries."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from eventdesk.auth import Principal
from eventdesk.database import execute_with_retry
from eventdesk.errors import InsufficientDataError
from eventdesk.models.auditorium import AuditoriumSchedule
from eventdesk.models.event import ApprovalStatus, Event
from eventdesk.schemas.auditorium import EventHeld, ScheduleEntry
from eventdesk.services.synthetic import occupancy_or_synthetic
from eventdesk.services.time_range import TimeRange

logger = logging.getLogger(__name__)


class AuditoriumService:
    """Service for auditorium schedule and event history."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_schedule(
        self,
        window: TimeRange,
        principal: Principal,
    ) -> list[ScheduleEntry]:
        """
        Bookings that start and end inside the window, earliest first.

        Organizers only see bookings of events they created.

        Raises:
            InsufficientDataError: If nothing is booked in the window.
        """
        query = (
            select(AuditoriumSchedule)
            .options(joinedload(AuditoriumSchedule.event))
            .where(
                AuditoriumSchedule.start_time >= window.start,
                AuditoriumSchedule.end_time <= window.end,
            )
            .order_by(AuditoriumSchedule.start_time)
        )

        if principal.is_organizer:
            query = query.join(AuditoriumSchedule.event).where(
                Event.created_by == principal.user_id
            )

        result = await execute_with_retry(self.db, query)
        schedules = list(result.scalars().all())

        if not schedules:
            raise InsufficientDataError()

        return [ScheduleEntry.from_model(schedule) for schedule in schedules]

    async def get_events_held(
        self,
        window: TimeRange,
        principal: Principal,
    ) -> list[EventHeld]:
        """
        Approved events dated inside the window, newest first.

        An event with no booked seats reports a synthetic occupancy derived
        from its name and date.

        Raises:
            InsufficientDataError: If no approved event falls in the window.
        """
        query = select(Event).where(
            Event.date >= window.start,
            Event.date <= window.end,
            Event.approval_status == ApprovalStatus.APPROVED,
        )

        if principal.is_organizer:
            query = query.where(Event.created_by == principal.user_id)

        result = await execute_with_retry(self.db, query.order_by(Event.date.desc()))
        events = list(result.scalars().all())

        if not events:
            raise InsufficientDataError()

        schedules = await self._first_schedules([event.event_id for event in events])

        held = []
        for event in events:
            occupancy = 0.0
            if event.total_seats > 0:
                occupancy = occupancy_or_synthetic(
                    event.occupancy_percentage, event.name, event.date.date()
                )
            held.append(
                EventHeld.from_model(event, occupancy, schedules.get(event.event_id))
            )

        logger.info(f"Found {len(held)} events held between {window.start} and {window.end}")
        return held

    async def _first_schedules(self, event_ids: list[int]) -> dict[int, AuditoriumSchedule]:
        """Earliest schedule of each event."""
        result = await execute_with_retry(
            self.db,
            select(AuditoriumSchedule)
            .where(AuditoriumSchedule.event_id.in_(event_ids))
            .order_by(AuditoriumSchedule.start_time),
        )

        first: dict[int, AuditoriumSchedule] = {}
        for schedule in result.scalars().all():
            first.setdefault(schedule.event_id, schedule)
        return first
