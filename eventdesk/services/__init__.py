"""Services package."""

from eventdesk.services.auditorium_service import AuditoriumService
from eventdesk.services.report_service import ReportService
from eventdesk.services.utilization_service import UtilizationService
from eventdesk.services.waiting_list_service import WaitingListService

__all__ = [
    "ReportService",
    "UtilizationService",
    "AuditoriumService",
    "WaitingListService",
]
