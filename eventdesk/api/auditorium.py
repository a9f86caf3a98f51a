"""Auditorium administration endpoints."""

from typing import Annotated, Awaitable, TypeVar

from fastapi import APIRouter, Query, Request, Response

from eventdesk.api.dependencies import (
    AdminUser,
    AuditoriumServiceDep,
    ClockDep,
    ReportViewer,
    UtilizationServiceDep,
)
from eventdesk.api.pdf import render_pdf_response
from eventdesk.errors import InsufficientDataError
from eventdesk.schemas.auditorium import (
    AuditoriumReportType,
    EventHeld,
    ScheduleEntry,
    UtilizationRecord,
)
from eventdesk.schemas.common import ListResponse
from eventdesk.services.report_documents import auditorium_document
from eventdesk.services.time_range import RangePolicy, resolve

router = APIRouter()

T = TypeVar("T")

FromParam = Annotated[str | None, Query(alias="from", description="YYYY-MM-DD")]
ToParam = Annotated[str | None, Query(alias="to", description="YYYY-MM-DD")]


async def _or_empty(pending: Awaitable[list[T]]) -> list[T]:
    try:
        return await pending
    except InsufficientDataError:
        return []


@router.get(
    "/schedule",
    response_model=ListResponse[ScheduleEntry],
    summary="Auditorium schedule",
)
async def get_schedule(
    principal: ReportViewer,
    auditorium_service: AuditoriumServiceDep,
    clock: ClockDep,
    from_: FromParam = None,
    to: ToParam = None,
) -> ListResponse[ScheduleEntry]:
    """Auditorium bookings in the range (default: the next 30 days)."""
    window = resolve(from_, to, RangePolicy.NEXT_30_DAYS, clock)
    entries = await auditorium_service.get_schedule(window, principal)
    return ListResponse[ScheduleEntry](count=len(entries), data=entries)


@router.get(
    "/events-held",
    response_model=ListResponse[EventHeld],
    summary="Events held in the auditorium",
)
async def get_events_held(
    principal: ReportViewer,
    auditorium_service: AuditoriumServiceDep,
    clock: ClockDep,
    from_: FromParam = None,
    to: ToParam = None,
) -> ListResponse[EventHeld]:
    """Approved events in the range (default: month to date), newest first."""
    window = resolve(from_, to, RangePolicy.MONTH_TO_DATE, clock)
    events = await auditorium_service.get_events_held(window, principal)
    return ListResponse[EventHeld](count=len(events), data=events)


@router.get(
    "/utilization",
    response_model=ListResponse[UtilizationRecord],
    summary="Daily auditorium utilization",
)
async def get_utilization(
    admin: AdminUser,
    utilization_service: UtilizationServiceDep,
    clock: ClockDep,
    from_: FromParam = None,
    to: ToParam = None,
) -> ListResponse[UtilizationRecord]:
    """
    Per-day utilization in the range (default: the last 30 days).

    Days without a cached row are computed from their schedules and cached.
    """
    window = resolve(from_, to, RangePolicy.LAST_30_DAYS, clock)
    records = await utilization_service.get_utilization(window)
    return ListResponse[UtilizationRecord](count=len(records), data=records)


@router.get(
    "/auditorium/download-report",
    summary="Download auditorium report as PDF",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def download_auditorium_report(
    request: Request,
    admin: AdminUser,
    auditorium_service: AuditoriumServiceDep,
    utilization_service: UtilizationServiceDep,
    clock: ClockDep,
    report_type: Annotated[AuditoriumReportType, Query(alias="type")] = AuditoriumReportType.ALL,
    from_: FromParam = None,
    to: ToParam = None,
) -> Response:
    """Render the requested auditorium sections (default: all, next 30 days) as a PDF."""
    window = resolve(from_, to, RangePolicy.NEXT_30_DAYS, clock)
    wants = {report_type} if report_type is not AuditoriumReportType.ALL else {
        AuditoriumReportType.SCHEDULE,
        AuditoriumReportType.EVENTS_HELD,
        AuditoriumReportType.UTILIZATION,
    }

    schedule = events_held = utilization = None
    if AuditoriumReportType.SCHEDULE in wants:
        schedule = await _or_empty(auditorium_service.get_schedule(window, admin))
    if AuditoriumReportType.EVENTS_HELD in wants:
        events_held = await _or_empty(auditorium_service.get_events_held(window, admin))
    if AuditoriumReportType.UTILIZATION in wants:
        utilization = await _or_empty(
            utilization_service.get_utilization(window, synthesize_missing=True)
        )

    document = auditorium_document(
        report_type,
        window,
        clock.now(),
        schedule=schedule,
        events_held=events_held,
        utilization=utilization,
    )
    return await render_pdf_response(request, document, clock.now())
