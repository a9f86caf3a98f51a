"""Sales report aggregation service."""

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from eventdesk.auth import Principal
from eventdesk.clock import Clock, system_clock
from eventdesk.database import execute_with_retry
from eventdesk.errors import InsufficientDataError, NO_ORGANIZER_EVENTS_MESSAGE
from eventdesk.models.event import Event
from eventdesk.models.order import Order, OrderStatus
from eventdesk.schemas.reports import (
    AllTimeReport,
    DailyReport,
    DatedOrder,
    EventSummary,
    HourlyRevenue,
    HourlySales,
    MonthDayRevenue,
    MonthDaySales,
    MonthlyReport,
    OrderSummary,
    ReportKind,
    SalesReport,
    WeekdayRevenue,
    WeekdaySales,
    WeeklyReport,
)
from eventdesk.services.time_range import (
    RangePolicy,
    TimeRange,
    day_range,
    days_in_month,
    month_range,
    resolve,
    week_range,
)

logger = logging.getLogger(__name__)

WEEKDAYS = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


def summarize_orders(orders: Iterable[Order]) -> tuple[int, float]:
    """Return ``(tickets sold, revenue)`` over the given orders."""
    tickets = 0
    revenue = 0.0
    for order in orders:
        tickets += order.ticket_count
        revenue += float(order.total_amount)
    return tickets, revenue


def distinct_events(orders: Iterable[Order]) -> list[Event]:
    """Events touched by the orders, each counted once."""
    events: dict[int, Event] = {}
    for order in orders:
        if order.event is not None:
            events.setdefault(order.event_id, order.event)
    return list(events.values())


def occupancy_for_events(events: Iterable[Event]) -> float:
    """Filled seats over total seats of the events, in percent."""
    total_seats = 0
    filled_seats = 0
    for event in events:
        if event.total_seats:
            total_seats += event.total_seats
            filled_seats += event.booked_seats
    if total_seats == 0:
        return 0.0
    return filled_seats / total_seats * 100


def bucket_by_hour(orders: Iterable[Order]) -> tuple[list[int], list[float]]:
    """Tickets and revenue in 24 hour-of-day buckets."""
    counts = [0] * 24
    amounts = [0.0] * 24
    for order in orders:
        hour = order.created_at.hour
        counts[hour] += order.ticket_count
        amounts[hour] += float(order.total_amount)
    return counts, amounts


def bucket_by_weekday(orders: Iterable[Order]) -> tuple[dict[str, int], dict[str, float]]:
    """Tickets and revenue keyed by weekday name, Monday first."""
    counts = {day: 0 for day in WEEKDAYS}
    amounts = {day: 0.0 for day in WEEKDAYS}
    for order in orders:
        day = WEEKDAYS[order.created_at.weekday()]
        counts[day] += order.ticket_count
        amounts[day] += float(order.total_amount)
    return counts, amounts


def bucket_by_month_day(
    orders: Iterable[Order],
    month_days: int,
) -> tuple[dict[int, int], dict[int, float]]:
    """Tickets and revenue keyed by day of month, 1..month_days."""
    counts = {day: 0 for day in range(1, month_days + 1)}
    amounts = {day: 0.0 for day in range(1, month_days + 1)}
    for order in orders:
        day = order.created_at.day
        counts[day] += order.ticket_count
        amounts[day] += float(order.total_amount)
    return counts, amounts


def summarize_event(event: Event, orders: list[Order]) -> EventSummary:
    """Per-event totals; occupancy stays 0 until a ticket has been sold."""
    confirmed = [o for o in orders if o.status == OrderStatus.CONFIRMED]
    tickets, revenue = summarize_orders(confirmed)
    occupancy = 0.0
    if orders and tickets:
        occupancy = event.occupancy_percentage
    return EventSummary(
        id=event.event_id,
        name=event.name,
        total_orders=len(orders),
        confirmed_orders=len(confirmed),
        tickets_sold=tickets,
        revenue=revenue,
        occupancy_percentage=occupancy,
    )


def occupancy_by_date(orders: list[Order], events: dict[int, Event]) -> dict[str, float]:
    """Occupancy of the events with confirmed orders on each order date."""
    event_ids_by_date: dict[str, set[int]] = {}
    for order in orders:
        key = order.created_at.date().isoformat()
        event_ids = event_ids_by_date.setdefault(key, set())
        if order.status == OrderStatus.CONFIRMED:
            event_ids.add(order.event_id)

    return {
        key: occupancy_for_events(events[i] for i in sorted(ids) if i in events)
        for key, ids in event_ids_by_date.items()
    }


class ReportService:
    """Service building daily, weekly, monthly and all-time sales reports."""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    async def get_owned_events(self, principal: Principal) -> list[Event] | None:
        """
        Events the principal may report on.

        Returns None for unscoped principals (admins).
        """
        if not principal.is_organizer:
            return None

        result = await execute_with_retry(
            self.db,
            select(Event).where(Event.created_by == principal.user_id),
        )
        return list(result.scalars().all())

    async def _scope_event_ids(self, principal: Principal) -> list[int] | None:
        events = await self.get_owned_events(principal)
        if events is None:
            return None
        if not events:
            logger.info(f"Organizer {principal.user_id} owns no events")
            raise InsufficientDataError()
        return [event.event_id for event in events]

    async def _load_orders(
        self,
        window: TimeRange,
        event_ids: list[int] | None,
        confirmed_only: bool = True,
    ) -> list[Order]:
        query = (
            select(Order)
            .options(joinedload(Order.event), selectinload(Order.tickets))
            .where(Order.created_at >= window.start, Order.created_at <= window.end)
        )

        if event_ids is not None:
            query = query.where(Order.event_id.in_(event_ids))

        if confirmed_only:
            query = query.where(Order.status == OrderStatus.CONFIRMED)

        query = query.order_by(Order.created_at, Order.order_id)

        result = await execute_with_retry(self.db, query)
        return list(result.scalars().unique().all())

    async def _confirmed_orders(self, principal: Principal, window: TimeRange) -> list[Order]:
        event_ids = await self._scope_event_ids(principal)
        orders = await self._load_orders(window, event_ids)
        if not orders:
            raise InsufficientDataError()
        return orders

    async def daily_report(self, principal: Principal, day: date) -> DailyReport:
        """Sales report of one day."""
        orders = await self._confirmed_orders(principal, day_range(day))
        tickets, revenue = summarize_orders(orders)
        counts, amounts = bucket_by_hour(orders)

        return DailyReport(
            date=day,
            tickets_sold=tickets,
            revenue=revenue,
            occupancy_percentage=occupancy_for_events(distinct_events(orders)),
            sales_data=[HourlySales(hour=h, count=c) for h, c in enumerate(counts)],
            revenue_data=[HourlyRevenue(hour=h, amount=a) for h, a in enumerate(amounts)],
        )

    async def weekly_report(self, principal: Principal, day: date) -> WeeklyReport:
        """Sales report of the Monday-to-Sunday week containing ``day``."""
        window = week_range(day)
        orders = await self._confirmed_orders(principal, window)
        tickets, revenue = summarize_orders(orders)
        counts, amounts = bucket_by_weekday(orders)

        return WeeklyReport(
            start_date=window.start,
            end_date=window.end,
            tickets_sold=tickets,
            revenue=revenue,
            occupancy_percentage=occupancy_for_events(distinct_events(orders)),
            sales_data=[WeekdaySales(day=d, count=counts[d]) for d in WEEKDAYS],
            revenue_data=[WeekdayRevenue(day=d, amount=amounts[d]) for d in WEEKDAYS],
        )

    async def monthly_report(self, principal: Principal, day: date) -> MonthlyReport:
        """Sales report of the calendar month containing ``day``."""
        orders = await self._confirmed_orders(principal, month_range(day))
        tickets, revenue = summarize_orders(orders)
        counts, amounts = bucket_by_month_day(orders, days_in_month(day))

        return MonthlyReport(
            month=day.month,
            year=day.year,
            tickets_sold=tickets,
            revenue=revenue,
            occupancy_percentage=occupancy_for_events(distinct_events(orders)),
            sales_data=[MonthDaySales(day=d, count=c) for d, c in counts.items()],
            revenue_data=[MonthDayRevenue(day=d, amount=a) for d, a in amounts.items()],
        )

    async def all_time_report(self, principal: Principal) -> AllTimeReport:
        """
        Report over every order since the all-time floor.

        Unlike the periodic reports, an empty order set yields a zero-filled
        report; only an organizer without events gets the no-data signal.
        """
        window = resolve(None, None, RangePolicy.ALL_TIME, self.clock)

        events = await self.get_owned_events(principal)
        if events is None:
            result = await execute_with_retry(self.db, select(Event).order_by(Event.event_id))
            events = list(result.scalars().all())
            event_ids = None
        elif not events:
            raise InsufficientDataError(NO_ORGANIZER_EVENTS_MESSAGE)
        else:
            event_ids = [event.event_id for event in events]

        orders = await self._load_orders(window, event_ids, confirmed_only=False)
        logger.info(
            f"All-time report for {principal.user_id}: "
            f"{len(orders)} orders across {len(events)} events"
        )
        if not orders:
            return AllTimeReport.empty()

        confirmed = [o for o in orders if o.status == OrderStatus.CONFIRMED]
        tickets, revenue = summarize_orders(confirmed)

        orders_by_date: dict[str, list[DatedOrder]] = {}
        orders_by_event: dict[int, list[Order]] = defaultdict(list)
        for order in orders:
            key = order.created_at.date().isoformat()
            orders_by_date.setdefault(key, []).append(DatedOrder.from_model(order))
            orders_by_event[order.event_id].append(order)

        return AllTimeReport(
            total_orders=len(orders),
            confirmed_orders=len(confirmed),
            tickets_sold=tickets,
            revenue=revenue,
            occupancy_percentage=occupancy_for_events(events),
            orders_data=[OrderSummary.from_model(order) for order in orders],
            orders_by_date=orders_by_date,
            event_summary=[
                summarize_event(event, orders_by_event.get(event.event_id, []))
                for event in events
            ],
            occupancy_by_date=occupancy_by_date(
                orders, {event.event_id: event for event in events}
            ),
        )

    async def build_report(
        self,
        kind: ReportKind,
        principal: Principal,
        day: date | None = None,
    ) -> SalesReport:
        """Dispatch to the report of the given kind."""
        day = day or self.clock.today()
        logger.info(f"Building {kind.value} report for {principal.user_id} ({day.isoformat()})")

        if kind is ReportKind.DAILY:
            return await self.daily_report(principal, day)
        if kind is ReportKind.WEEKLY:
            return await self.weekly_report(principal, day)
        if kind is ReportKind.ALL:
            return await self.all_time_report(principal)
        return await self.monthly_report(principal, day)
