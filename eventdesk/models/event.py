"""Event model."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdesk.models.base import Base, BigIntPK

if TYPE_CHECKING:
    from eventdesk.models.auditorium import AuditoriumSchedule
    from eventdesk.models.order import Order


class ApprovalStatus(str, enum.Enum):
    """Event approval status enum."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Event(Base):
    """Event model representing a ticketed event held in the auditorium."""

    __tablename__ = "events"

    event_id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    time: Mapped[str | None] = mapped_column(String(8))
    location: Mapped[str | None] = mapped_column(String(255))
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus), default=ApprovalStatus.PENDING
    )
    created_by: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )

    # Relationships
    orders: Mapped[list["Order"]] = relationship("Order", back_populates="event")
    schedules: Mapped[list["AuditoriumSchedule"]] = relationship(
        "AuditoriumSchedule", back_populates="event"
    )

    __table_args__ = (
        Index("idx_events_created_by", "created_by"),
        Index("idx_events_date", "date"),
    )

    @property
    def booked_seats(self) -> int:
        """Seats no longer available."""
        return self.total_seats - self.available_seats

    @property
    def fill_rate(self) -> float:
        """Booked share of seats in [0, 1]; 0 when the event has no seats."""
        if not self.total_seats:
            return 0.0
        return self.booked_seats / self.total_seats

    @property
    def occupancy_percentage(self) -> float:
        """Derived seat occupancy in percent."""
        return self.fill_rate * 100
