"""Waiting list schemas."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from eventdesk.models.waiting_list import WaitingListEntry
from eventdesk.schemas.common import CamelSchema

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class WaitingListStatus(str, Enum):
    """Waiting list status enum."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WaitingListCreate(CamelSchema):
    """Schema for registering to an event's waiting list."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    event: int = Field(..., gt=0)


class WaitingListStatusUpdate(CamelSchema):
    """Schema for an admin status change."""

    status: WaitingListStatus
    notes: str | None = Field(None, max_length=2000)


class WaitingListDelete(CamelSchema):
    """Email confirming ownership of an entry."""

    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)


class WaitingListResponse(CamelSchema):
    """Schema for waiting list entry response."""

    id: int
    reference: str
    name: str
    email: str
    phone: str
    event_id: int
    event_name: str | None
    status: WaitingListStatus
    notes: str | None
    registered_at: datetime

    @classmethod
    def from_model(cls, entry: WaitingListEntry) -> "WaitingListResponse":
        return cls(
            id=entry.entry_id,
            reference=entry.reference,
            name=entry.name,
            email=entry.email,
            phone=entry.phone,
            event_id=entry.event_id,
            event_name=entry.event.name if entry.event else None,
            status=WaitingListStatus(entry.status.value),
            notes=entry.notes,
            registered_at=entry.registered_at,
        )
