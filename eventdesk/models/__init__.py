"""SQLAlchemy models."""

from eventdesk.models.auditorium import AuditoriumSchedule, Utilization
from eventdesk.models.base import Base
from eventdesk.models.event import ApprovalStatus, Event
from eventdesk.models.order import Order, OrderStatus, OrderTicket
from eventdesk.models.waiting_list import WaitingListEntry, WaitingListStatus

__all__ = [
    "Base",
    "Event",
    "ApprovalStatus",
    "Order",
    "OrderStatus",
    "OrderTicket",
    "AuditoriumSchedule",
    "Utilization",
    "WaitingListEntry",
    "WaitingListStatus",
]
