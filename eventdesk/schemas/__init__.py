"""Pydantic schemas for API request/response."""

from eventdesk.schemas.auditorium import (
    AuditoriumReportType,
    EventHeld,
    ScheduleEntry,
    UtilizationRecord,
)
from eventdesk.schemas.common import ErrorResponse, ListResponse, MessageResponse
from eventdesk.schemas.reports import (
    AllTimeReport,
    DailyReport,
    MonthlyReport,
    ReportKind,
    WeeklyReport,
)
from eventdesk.schemas.waiting_list import (
    WaitingListCreate,
    WaitingListResponse,
    WaitingListStatusUpdate,
)

__all__ = [
    "ErrorResponse",
    "ListResponse",
    "MessageResponse",
    "ReportKind",
    "DailyReport",
    "WeeklyReport",
    "MonthlyReport",
    "AllTimeReport",
    "AuditoriumReportType",
    "ScheduleEntry",
    "EventHeld",
    "UtilizationRecord",
    "WaitingListCreate",
    "WaitingListResponse",
    "WaitingListStatusUpdate",
]
