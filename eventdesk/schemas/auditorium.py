"""Auditorium schedule and utilization schemas."""

from datetime import date, datetime
from enum import Enum

from eventdesk.models.auditorium import AuditoriumSchedule, Utilization
from eventdesk.models.event import Event
from eventdesk.schemas.common import BaseSchema, CamelSchema


class AuditoriumReportType(str, Enum):
    """Sections available in the auditorium PDF report."""

    SCHEDULE = "schedule"
    EVENTS_HELD = "events-held"
    UTILIZATION = "utilization"
    ALL = "all"


class EventBrief(CamelSchema):
    """Event fields attached to a schedule entry."""

    id: int
    name: str
    date: datetime
    time: str | None
    location: str | None

    @classmethod
    def from_model(cls, event: Event) -> "EventBrief":
        return cls(
            id=event.event_id,
            name=event.name,
            date=event.date,
            time=event.time,
            location=event.location,
        )


class ScheduleEntry(CamelSchema):
    """Booked auditorium interval."""

    id: int
    event: EventBrief | None
    booked_by: str
    start_time: datetime
    end_time: datetime
    usage_hours: float

    @classmethod
    def from_model(cls, schedule: AuditoriumSchedule) -> "ScheduleEntry":
        return cls(
            id=schedule.schedule_id,
            event=EventBrief.from_model(schedule.event) if schedule.event else None,
            booked_by=schedule.booked_by,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            usage_hours=round(schedule.usage_hours, 2),
        )


class EventHeld(CamelSchema):
    """Approved event with occupancy and auditorium usage."""

    id: int
    name: str
    date: datetime
    time: str | None
    organizer: str
    total_seats: int
    available_seats: int
    occupancy: float
    usage_hours: float | None

    @classmethod
    def from_model(
        cls,
        event: Event,
        occupancy: float,
        schedule: AuditoriumSchedule | None,
    ) -> "EventHeld":
        return cls(
            id=event.event_id,
            name=event.name,
            date=event.date,
            time=event.time,
            organizer=event.created_by,
            total_seats=event.total_seats,
            available_seats=event.available_seats,
            occupancy=round(occupancy, 1),
            usage_hours=round(schedule.usage_hours, 2) if schedule else None,
        )


class UtilizationRecord(BaseSchema):
    """Per-day utilization, keyed the way the cache rows are stored."""

    date: date
    total_hours_used: float
    total_hours_available: float
    events: list[int]
    utilization_percentage: float
    synthetic: bool = False

    @classmethod
    def from_model(cls, record: Utilization) -> "UtilizationRecord":
        return cls(
            date=record.date,
            total_hours_used=record.total_hours_used,
            total_hours_available=record.total_hours_available,
            events=list(record.event_ids or []),
            utilization_percentage=round(record.utilization_percentage or 0.0, 1),
        )
