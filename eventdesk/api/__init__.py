"""API routers package."""

from eventdesk.api.auditorium import router as auditorium_router
from eventdesk.api.reports import router as reports_router
from eventdesk.api.waiting_list import router as waiting_list_router

__all__ = [
    "reports_router",
    "auditorium_router",
    "waiting_list_router",
]
