"""Tests for sales report aggregation."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from eventdesk.errors import (
    INSUFFICIENT_DATA_MESSAGE,
    NO_ORGANIZER_EVENTS_MESSAGE,
    InsufficientDataError,
)
from eventdesk.models import Event, Order, OrderStatus, OrderTicket
from eventdesk.schemas.reports import DailyReport, ReportKind, WeeklyReport
from eventdesk.services.report_service import (
    WEEKDAYS,
    ReportService,
    bucket_by_hour,
    bucket_by_month_day,
    occupancy_for_events,
    summarize_orders,
)
from tests.helpers import (
    ADMIN,
    ORGANIZER,
    OTHER_ORGANIZER,
    create_event,
    create_order,
)


def transient_order(amount: str, quantities, created_at: datetime) -> Order:
    return Order(
        total_amount=Decimal(amount),
        created_at=created_at,
        tickets=[
            OrderTicket(ticket_type="Regular", quantity=q, price=Decimal("0"))
            for q in quantities
        ],
    )


@pytest.fixture
def service(db, clock) -> ReportService:
    return ReportService(db, clock)


class TestReducers:
    """Tests for the pure reducer functions."""

    def test_totals(self):
        """Given orders of 100 and 200 with 2 and 3 tickets, totals are 300 and 5."""
        orders = [
            transient_order("100.00", [2], datetime(2025, 3, 12, 9)),
            transient_order("200.00", [1, 2], datetime(2025, 3, 12, 14)),
        ]
        assert summarize_orders(orders) == (5, 300.0)

    def test_hour_buckets_are_complete(self):
        counts, amounts = bucket_by_hour([transient_order("50", [1], datetime(2025, 3, 12, 23))])
        assert len(counts) == len(amounts) == 24
        assert counts[23] == 1
        assert sum(counts) == 1

    def test_month_day_buckets(self):
        counts, _ = bucket_by_month_day([], 29)
        assert list(counts) == list(range(1, 30))

    def test_occupancy_over_events(self):
        events = [
            Event(total_seats=100, available_seats=60),
            Event(total_seats=100, available_seats=100),
            Event(total_seats=0, available_seats=0),
        ]
        assert occupancy_for_events(events) == 20.0
        assert occupancy_for_events([]) == 0.0


class TestDailyReport:
    async def test_aggregates_confirmed_orders(self, db, service):
        event = await create_event(db, available_seats=60)
        await create_order(
            db, event, created_at=datetime(2025, 3, 12, 9, 15), quantities=(2,), amount="100"
        )
        await create_order(
            db, event, created_at=datetime(2025, 3, 12, 14, 40), quantities=(3,), amount="200"
        )
        await create_order(
            db,
            event,
            created_at=datetime(2025, 3, 12, 15, 0),
            amount="999",
            status=OrderStatus.CANCELLED,
        )

        report = await service.daily_report(ADMIN, date(2025, 3, 12))

        assert isinstance(report, DailyReport)
        assert report.tickets_sold == 5
        assert report.revenue == 300.0
        assert len(report.sales_data) == 24
        assert report.sales_data[9].count == 2
        assert report.revenue_data[14].amount == 200.0
        assert report.sales_data[15].count == 0

    async def test_occupancy_counts_each_event_once(self, db, service):
        """Given two orders for one 40% full event, occupancy is 40, not 80."""
        event = await create_event(db, available_seats=60)
        for hour in (10, 11):
            await create_order(db, event, created_at=datetime(2025, 3, 12, hour))

        report = await service.daily_report(ADMIN, date(2025, 3, 12))
        assert report.occupancy_percentage == pytest.approx(40.0)

    async def test_no_orders_is_insufficient(self, db, service):
        await create_event(db)
        with pytest.raises(InsufficientDataError) as exc_info:
            await service.daily_report(ADMIN, date(2025, 3, 12))
        assert exc_info.value.message == INSUFFICIENT_DATA_MESSAGE

    async def test_day_boundaries(self, db, service):
        event = await create_event(db)
        await create_order(db, event, created_at=datetime(2025, 3, 11, 23, 59, 59))
        await create_order(db, event, created_at=datetime(2025, 3, 13, 0, 0, 0))
        with pytest.raises(InsufficientDataError):
            await service.daily_report(ADMIN, date(2025, 3, 12))


class TestWeeklyAndMonthly:
    async def test_weekly_buckets_monday_first(self, db, service):
        event = await create_event(db)
        await create_order(db, event, created_at=datetime(2025, 3, 16, 20), quantities=(4,))
        await create_order(db, event, created_at=datetime(2025, 3, 17, 9), quantities=(7,))

        report = await service.weekly_report(ADMIN, date(2025, 3, 12))

        assert isinstance(report, WeeklyReport)
        assert [bucket.day for bucket in report.sales_data] == WEEKDAYS
        assert report.sales_data[-1].count == 4
        assert report.tickets_sold == 4
        assert report.start_date == datetime(2025, 3, 10)

    async def test_monthly_has_every_day(self, db, service):
        event = await create_event(db)
        await create_order(db, event, created_at=datetime(2024, 2, 29, 12), amount="80")

        report = await service.monthly_report(ADMIN, date(2024, 2, 10))

        assert (report.month, report.year) == (2, 2024)
        assert len(report.sales_data) == 29
        assert report.revenue_data[28].amount == 80.0

    async def test_build_report_defaults_to_today(self, db, service):
        event = await create_event(db)
        await create_order(db, event, created_at=datetime(2025, 3, 12, 8))

        report = await service.build_report(ReportKind.DAILY, ADMIN)
        assert report.date == date(2025, 3, 12)


class TestScope:
    """Tests for organizer scoping."""

    async def test_organizer_without_events(self, db, service):
        event = await create_event(db, owner=ORGANIZER.user_id)
        await create_order(db, event, created_at=datetime(2025, 3, 12, 9))

        with pytest.raises(InsufficientDataError):
            await service.daily_report(OTHER_ORGANIZER, date(2025, 3, 12))

    async def test_organizer_never_sees_foreign_orders(self, db, service):
        mine = await create_event(db, "Mine", owner=ORGANIZER.user_id)
        theirs = await create_event(db, "Theirs", owner=OTHER_ORGANIZER.user_id)
        await create_order(db, mine, created_at=datetime(2025, 3, 12, 9), amount="10")
        await create_order(db, theirs, created_at=datetime(2025, 3, 12, 9), amount="500")

        report = await service.daily_report(ORGANIZER, date(2025, 3, 12))
        assert report.revenue == 10.0

        admin_report = await service.daily_report(ADMIN, date(2025, 3, 12))
        assert admin_report.revenue == 510.0


class TestAllTimeReport:
    async def test_organizer_without_events_gets_sentinel(self, service):
        with pytest.raises(InsufficientDataError) as exc_info:
            await service.all_time_report(ORGANIZER)
        assert exc_info.value.message == NO_ORGANIZER_EVENTS_MESSAGE

    async def test_events_without_orders_is_zero_filled(self, db, service):
        await create_event(db)

        report = await service.all_time_report(ORGANIZER)

        assert report.total_orders == 0
        assert report.tickets_sold == 0
        assert report.orders_data == []
        assert report.occupancy_by_date == {}

    async def test_all_statuses_with_confirmed_totals(self, db, service):
        concert = await create_event(db, "Concert", available_seats=50)
        await create_event(db, "Quiet Evening")
        await create_order(
            db, concert, created_at=datetime(2025, 3, 1, 10), quantities=(2,), amount="100"
        )
        await create_order(
            db, concert, created_at=datetime(2025, 3, 1, 12), quantities=(1,), amount="40"
        )
        await create_order(
            db,
            concert,
            created_at=datetime(2025, 3, 2, 9),
            amount="70",
            status=OrderStatus.PENDING,
        )

        report = await service.all_time_report(ADMIN)

        assert report.total_orders == 3
        assert report.confirmed_orders == 2
        assert report.tickets_sold == 3
        assert report.revenue == 140.0
        assert sorted(report.orders_by_date) == ["2025-03-01", "2025-03-02"]
        assert len(report.orders_by_date["2025-03-01"]) == 2
        # 50 of 200 seats over both events
        assert report.occupancy_percentage == pytest.approx(25.0)
        assert report.occupancy_by_date["2025-03-01"] == pytest.approx(50.0)
        assert report.occupancy_by_date["2025-03-02"] == 0.0

        summaries = {summary.name: summary for summary in report.event_summary}
        assert summaries["Concert"].total_orders == 3
        assert summaries["Concert"].confirmed_orders == 2
        assert summaries["Concert"].occupancy_percentage == pytest.approx(50.0)
        assert summaries["Quiet Evening"].total_orders == 0
        assert summaries["Quiet Evening"].occupancy_percentage == 0.0

    async def test_serializes_camel_case(self, db, service):
        event = await create_event(db)
        await create_order(db, event, created_at=datetime(2025, 3, 1, 10))

        payload = (await service.all_time_report(ADMIN)).model_dump(by_alias=True)

        assert {"totalOrders", "ordersByDate", "eventSummary", "occupancyByDate"} <= set(payload)
        assert payload["ordersData"][0]["customerName"] == "Dana Putri"
