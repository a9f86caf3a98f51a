"""Sales report endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query, Request, Response

from eventdesk.api.dependencies import ClockDep, ReportServiceDep, ReportViewer
from eventdesk.api.pdf import NO_CACHE_HEADERS, render_pdf_response
from eventdesk.clock import Clock
from eventdesk.schemas.reports import (
    AllTimeReport,
    DailyReport,
    MonthlyReport,
    ReportKind,
    WeeklyReport,
)
from eventdesk.services.report_documents import sales_document
from eventdesk.services.time_range import parse_date

router = APIRouter()

DateParam = Annotated[str | None, Query(alias="date", description="YYYY-MM-DD")]


def _target_day(value: str | None, clock: Clock) -> date:
    return parse_date(value) if value else clock.today()


@router.get(
    "/daily",
    response_model=DailyReport,
    summary="Daily sales report",
)
async def get_daily_report(
    response: Response,
    principal: ReportViewer,
    report_service: ReportServiceDep,
    clock: ClockDep,
    target: DateParam = None,
) -> DailyReport:
    """Tickets and revenue of one day in 24 hourly buckets (default: today)."""
    response.headers.update(NO_CACHE_HEADERS)
    return await report_service.daily_report(principal, _target_day(target, clock))


@router.get(
    "/weekly",
    response_model=WeeklyReport,
    summary="Weekly sales report",
)
async def get_weekly_report(
    response: Response,
    principal: ReportViewer,
    report_service: ReportServiceDep,
    clock: ClockDep,
    target: DateParam = None,
) -> WeeklyReport:
    """Sales of the Monday-to-Sunday week containing ``date`` (default: this week)."""
    response.headers.update(NO_CACHE_HEADERS)
    return await report_service.weekly_report(principal, _target_day(target, clock))


@router.get(
    "/monthly",
    response_model=MonthlyReport,
    summary="Monthly sales report",
)
async def get_monthly_report(
    response: Response,
    principal: ReportViewer,
    report_service: ReportServiceDep,
    clock: ClockDep,
    target: DateParam = None,
) -> MonthlyReport:
    """Sales of the calendar month containing ``date`` (default: this month)."""
    response.headers.update(NO_CACHE_HEADERS)
    return await report_service.monthly_report(principal, _target_day(target, clock))


@router.get(
    "/all",
    response_model=AllTimeReport,
    summary="All-time sales report",
)
async def get_all_time_report(
    response: Response,
    principal: ReportViewer,
    report_service: ReportServiceDep,
) -> AllTimeReport:
    """Every order since the all-time floor, with per-event and per-date breakdowns."""
    response.headers.update(NO_CACHE_HEADERS)
    return await report_service.all_time_report(principal)


@router.get(
    "/download",
    summary="Download sales report as PDF",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def download_report(
    request: Request,
    principal: ReportViewer,
    report_service: ReportServiceDep,
    clock: ClockDep,
    kind: Annotated[ReportKind, Query(alias="type")] = ReportKind.MONTHLY,
    target: DateParam = None,
) -> Response:
    """Render the requested sales report as a PDF attachment."""
    report = await report_service.build_report(kind, principal, _target_day(target, clock))
    document = sales_document(report, clock.now())
    return await render_pdf_response(request, document, clock.now())
