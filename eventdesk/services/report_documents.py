"""Mapping of report data onto printable documents."""

from dataclasses import dataclass, field
from datetime import date, datetime

from eventdesk.errors import InsufficientDataError
from eventdesk.schemas.auditorium import (
    AuditoriumReportType,
    EventHeld,
    ScheduleEntry,
    UtilizationRecord,
)
from eventdesk.schemas.reports import (
    AllTimeReport,
    DailyReport,
    MonthlyReport,
    SalesReport,
    WeeklyReport,
)
from eventdesk.services.pdf_renderer import Column, TableSection
from eventdesk.services.time_range import TimeRange

FUTURE_SALES_NOTE = "This period extends into the future; figures cover orders placed so far."
FUTURE_UTILIZATION_NOTE = "Utilization for future dates is a projection."

AUDITORIUM_LABELS = {
    AuditoriumReportType.SCHEDULE: "Schedule",
    AuditoriumReportType.EVENTS_HELD: "Events Held",
    AuditoriumReportType.UTILIZATION: "Utilization",
    AuditoriumReportType.ALL: "Full Overview",
}


@dataclass
class ReportDocument:
    """Everything the renderer needs for one PDF."""

    title: str
    filename: str
    summary: list[tuple[str, str]]
    sections: list[TableSection]
    notes: list[str] = field(default_factory=list)
    subtitle: str | None = None

    @property
    def has_rows(self) -> bool:
        return any(section.rows for section in self.sections)


def money(amount: float) -> str:
    return f"{amount:,.2f}"


def percent(value: float) -> str:
    return f"{value:.1f}%"


def _sales_summary(report: SalesReport) -> list[tuple[str, str]]:
    average = report.revenue / report.tickets_sold if report.tickets_sold else 0.0
    return [
        ("Tickets Sold", str(report.tickets_sold)),
        ("Revenue", money(report.revenue)),
        ("Average per Ticket", money(average)),
        ("Seat Occupancy", percent(report.occupancy_percentage)),
    ]


def _bucket_section(title: str, label: str, keys, counts, amounts) -> TableSection:
    return TableSection(
        title=title,
        columns=[
            Column(label, 175),
            Column("Tickets Sold", 160, "right"),
            Column("Revenue", 180, "right"),
        ],
        rows=[
            [str(key), str(count), money(amount)]
            for key, count, amount in zip(keys, counts, amounts)
            if count or amount
        ],
    )


def daily_document(report: DailyReport) -> ReportDocument:
    section = _bucket_section(
        "Sales by Hour",
        "Hour",
        [f"{bucket.hour:02d}:00" for bucket in report.sales_data],
        [bucket.count for bucket in report.sales_data],
        [bucket.amount for bucket in report.revenue_data],
    )
    return ReportDocument(
        title=f"Daily Report - {report.date:%d %B %Y}",
        filename=f"daily-report-{report.date:%Y-%m-%d}",
        summary=_sales_summary(report),
        sections=[section],
    )


def weekly_document(report: WeeklyReport) -> ReportDocument:
    section = _bucket_section(
        "Sales by Day",
        "Day",
        [bucket.day for bucket in report.sales_data],
        [bucket.count for bucket in report.sales_data],
        [bucket.amount for bucket in report.revenue_data],
    )
    start, end = report.start_date, report.end_date
    return ReportDocument(
        title=f"Weekly Report - {start:%d %b} to {end:%d %b %Y}",
        filename=f"weekly-report-{start:%Y-%m-%d}-{end:%Y-%m-%d}",
        summary=_sales_summary(report),
        sections=[section],
    )


def monthly_document(report: MonthlyReport) -> ReportDocument:
    section = _bucket_section(
        "Sales by Day of Month",
        "Day",
        [bucket.day for bucket in report.sales_data],
        [bucket.count for bucket in report.sales_data],
        [bucket.amount for bucket in report.revenue_data],
    )
    first_day = date(report.year, report.month, 1)
    return ReportDocument(
        title=f"Monthly Report - {first_day:%B %Y}",
        filename=f"monthly-report-{first_day:%Y-%m}",
        summary=_sales_summary(report),
        sections=[section],
    )


def all_time_document(report: AllTimeReport, today: date) -> ReportDocument:
    events = TableSection(
        title="Event Summary",
        columns=[
            Column("Event", 170),
            Column("Orders", 55, "right"),
            Column("Confirmed", 65, "right"),
            Column("Tickets", 55, "right"),
            Column("Revenue", 90, "right"),
            Column("Occupancy", 75, "right"),
        ],
        rows=[
            [
                event.name,
                str(event.total_orders),
                str(event.confirmed_orders),
                str(event.tickets_sold),
                money(event.revenue),
                percent(event.occupancy_percentage),
            ]
            for event in report.event_summary
            if event.total_orders
        ],
    )

    by_date = TableSection(
        title="Orders by Date",
        columns=[
            Column("Date", 95),
            Column("Orders", 70, "right"),
            Column("Confirmed", 80, "right"),
            Column("Tickets", 70, "right"),
            Column("Revenue", 100, "right"),
            Column("Occupancy", 95, "right"),
        ],
    )
    for key in sorted(report.orders_by_date):
        orders = report.orders_by_date[key]
        confirmed = [order for order in orders if order.status == "confirmed"]
        by_date.rows.append(
            [
                key,
                str(len(orders)),
                str(len(confirmed)),
                str(sum(order.ticket_count for order in confirmed)),
                money(sum(order.total_amount for order in confirmed)),
                percent(report.occupancy_by_date.get(key, 0.0)),
            ]
        )

    summary = [
        ("Total Orders", str(report.total_orders)),
        ("Confirmed Orders", str(report.confirmed_orders)),
    ] + _sales_summary(report)

    return ReportDocument(
        title=f"All Time Report - As of {today:%d %B %Y}",
        filename=f"all-time-report-{today:%Y-%m-%d}",
        summary=summary,
        sections=[events, by_date],
    )


def _period_is_future(report: SalesReport, now: datetime) -> bool:
    if isinstance(report, DailyReport):
        return report.date >= now.date()
    if isinstance(report, WeeklyReport):
        return report.end_date > now
    if isinstance(report, MonthlyReport):
        return (report.year, report.month) >= (now.year, now.month)
    return False


def sales_document(report: SalesReport, now: datetime) -> ReportDocument:
    """
    Build the document of a sales report.

    Raises:
        InsufficientDataError: If the report has no rows to print.
    """
    if isinstance(report, DailyReport):
        document = daily_document(report)
    elif isinstance(report, WeeklyReport):
        document = weekly_document(report)
    elif isinstance(report, MonthlyReport):
        document = monthly_document(report)
    else:
        document = all_time_document(report, now.date())

    if not document.has_rows:
        raise InsufficientDataError()

    if _period_is_future(report, now):
        document.notes.append(FUTURE_SALES_NOTE)
    return document


def schedule_section(entries: list[ScheduleEntry]) -> TableSection:
    return TableSection(
        title="Auditorium Schedule",
        columns=[
            Column("Date", 75),
            Column("Start", 50),
            Column("End", 50),
            Column("Event", 190),
            Column("Booked By", 90),
            Column("Hours", 60, "right"),
        ],
        rows=[
            [
                f"{entry.start_time:%Y-%m-%d}",
                f"{entry.start_time:%H:%M}",
                f"{entry.end_time:%H:%M}",
                entry.event.name if entry.event else "Unknown Event",
                entry.booked_by,
                f"{entry.usage_hours:.2f}",
            ]
            for entry in entries
        ],
    )


def events_held_section(events: list[EventHeld]) -> TableSection:
    return TableSection(
        title="Events Held",
        columns=[
            Column("Event", 170),
            Column("Date", 75),
            Column("Time", 50),
            Column("Seats", 55, "right"),
            Column("Available", 60, "right"),
            Column("Occupancy", 60, "right"),
            Column("Hours", 45, "right"),
        ],
        rows=[
            [
                event.name,
                f"{event.date:%Y-%m-%d}",
                event.time or "-",
                str(event.total_seats),
                str(event.available_seats),
                percent(event.occupancy),
                f"{event.usage_hours:.2f}" if event.usage_hours is not None else "-",
            ]
            for event in events
        ],
    )


def utilization_section(records: list[UtilizationRecord]) -> TableSection:
    return TableSection(
        title="Daily Utilization",
        columns=[
            Column("Date", 90),
            Column("Hours Used", 85, "right"),
            Column("Available", 85, "right"),
            Column("Utilization", 90, "right"),
            Column("Events", 70, "right"),
            Column("Source", 95),
        ],
        rows=[
            [
                record.date.isoformat(),
                f"{record.total_hours_used:.1f}",
                f"{record.total_hours_available:.1f}",
                percent(record.utilization_percentage),
                str(len(record.events)),
                "Estimated" if record.synthetic else "Recorded",
            ]
            for record in records
        ],
    )


def auditorium_document(
    report_type: AuditoriumReportType,
    window: TimeRange,
    now: datetime,
    schedule: list[ScheduleEntry] | None = None,
    events_held: list[EventHeld] | None = None,
    utilization: list[UtilizationRecord] | None = None,
) -> ReportDocument:
    """
    Build the auditorium document from whichever categories were requested.

    Raises:
        InsufficientDataError: If none of the requested categories has data.
    """
    summary: list[tuple[str, str]] = []
    sections: list[TableSection] = []

    if schedule is not None:
        summary.append(("Scheduled Bookings", str(len(schedule))))
        summary.append(
            ("Booked Hours", f"{sum(entry.usage_hours for entry in schedule):.1f}")
        )
        sections.append(schedule_section(schedule))

    if events_held is not None:
        summary.append(("Events Held", str(len(events_held))))
        if events_held:
            average = sum(event.occupancy for event in events_held) / len(events_held)
            summary.append(("Average Occupancy", percent(average)))
        sections.append(events_held_section(events_held))

    if utilization is not None:
        if utilization:
            average = sum(r.utilization_percentage for r in utilization) / len(utilization)
            peak = max(utilization, key=lambda r: r.utilization_percentage)
            summary.append(("Average Utilization", percent(average)))
            summary.append(
                ("Peak Day", f"{peak.date.isoformat()} ({percent(peak.utilization_percentage)})")
            )
        sections.append(utilization_section(utilization))

    document = ReportDocument(
        title=f"Auditorium Report - {AUDITORIUM_LABELS[report_type]}",
        subtitle=f"{window.start:%d %b %Y} - {window.end:%d %b %Y}",
        filename=(
            f"auditorium-{report_type.value}-report-"
            f"{window.start_date:%Y-%m-%d}-{window.end_date:%Y-%m-%d}"
        ),
        summary=summary,
        sections=sections,
    )

    if not document.has_rows:
        raise InsufficientDataError()

    if utilization is not None and window.includes_future(now):
        document.notes.append(FUTURE_UTILIZATION_NOTE)
    return document
