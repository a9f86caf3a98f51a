"""Auditorium schedule and utilization models."""

from datetime import date as date_type
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdesk.models.base import Base, BigIntPK

if TYPE_CHECKING:
    from eventdesk.models.event import Event


class AuditoriumSchedule(Base):
    """One booked usage interval of the shared auditorium."""

    __tablename__ = "auditorium_schedules"

    schedule_id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("events.event_id"), nullable=False
    )
    booked_by: Mapped[str] = mapped_column(String(50), nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    event: Mapped["Event"] = relationship("Event", back_populates="schedules")

    __table_args__ = (
        Index("idx_schedules_start_end", "start_time", "end_time"),
        Index("idx_schedules_event", "event_id"),
    )

    @property
    def usage_hours(self) -> float:
        """Length of the booking in hours."""
        return (self.end_time - self.start_time).total_seconds() / 3600


class Utilization(Base):
    """Per-day auditorium utilization cache row, materialized from schedules."""

    __tablename__ = "utilization"

    utilization_id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, autoincrement=True
    )
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    total_hours_used: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_hours_available: Mapped[float] = mapped_column(
        Float, nullable=False, default=24.0
    )
    event_ids: Mapped[list[int]] = mapped_column(JSON, default=list)
    utilization_percentage: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )

    __table_args__ = (UniqueConstraint("date", name="uk_utilization_date"),)
