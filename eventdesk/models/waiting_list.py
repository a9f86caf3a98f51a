"""Waiting list model."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdesk.models.base import Base, BigIntPK

if TYPE_CHECKING:
    from eventdesk.models.event import Event


class WaitingListStatus(str, enum.Enum):
    """Waiting list entry status enum."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WaitingListEntry(Base):
    """Registration of interest for a sold-out or upcoming event."""

    __tablename__ = "waiting_list"

    entry_id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    reference: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), default="-")
    event_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("events.event_id"), nullable=False
    )
    status: Mapped[WaitingListStatus] = mapped_column(
        Enum(WaitingListStatus), default=WaitingListStatus.PENDING
    )
    notes: Mapped[str | None] = mapped_column(Text)
    registered_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )

    # Relationships
    event: Mapped["Event"] = relationship("Event")

    __table_args__ = (
        UniqueConstraint("email", "event_id", name="uk_waiting_list_email_event"),
        Index("idx_waiting_list_status", "status"),
    )
