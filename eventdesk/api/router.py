"""API main router."""

from fastapi import APIRouter

from eventdesk.api.auditorium import router as auditorium_router
from eventdesk.api.reports import router as reports_router
from eventdesk.api.waiting_list import router as waiting_list_router

router = APIRouter()

router.include_router(reports_router, prefix="/reports", tags=["Reports"])
router.include_router(auditorium_router, prefix="/admin", tags=["Auditorium"])
router.include_router(waiting_list_router, tags=["Waiting List"])
