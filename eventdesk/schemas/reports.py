"""Sales report schemas."""

from datetime import date, datetime
from enum import Enum

from eventdesk.models.order import Order
from eventdesk.schemas.common import CamelSchema


class ReportKind(str, Enum):
    """Sales report families."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL = "all"


class HourlySales(CamelSchema):
    hour: int
    count: int


class HourlyRevenue(CamelSchema):
    hour: int
    amount: float


class WeekdaySales(CamelSchema):
    day: str
    count: int


class WeekdayRevenue(CamelSchema):
    day: str
    amount: float


class MonthDaySales(CamelSchema):
    day: int
    count: int


class MonthDayRevenue(CamelSchema):
    day: int
    amount: float


class SalesTotals(CamelSchema):
    """Totals shared by every periodic report."""

    tickets_sold: int
    revenue: float
    occupancy_percentage: float


class DailyReport(SalesTotals):
    """Sales of one day in 24 hourly buckets."""

    date: date
    sales_data: list[HourlySales]
    revenue_data: list[HourlyRevenue]


class WeeklyReport(SalesTotals):
    """Sales of one Monday-to-Sunday week."""

    start_date: datetime
    end_date: datetime
    sales_data: list[WeekdaySales]
    revenue_data: list[WeekdayRevenue]


class MonthlyReport(SalesTotals):
    """Sales of one calendar month in day-of-month buckets."""

    month: int
    year: int
    sales_data: list[MonthDaySales]
    revenue_data: list[MonthDayRevenue]


class DatedOrder(CamelSchema):
    """Order entry grouped under its creation date."""

    id: int
    event_id: int
    event_name: str
    total_amount: float
    status: str
    ticket_count: int

    @classmethod
    def from_model(cls, order: Order) -> "DatedOrder":
        return cls(
            id=order.order_id,
            event_id=order.event_id,
            event_name=order.event.name if order.event else "Unknown Event",
            total_amount=float(order.total_amount),
            status=order.status.value,
            ticket_count=order.ticket_count,
        )


class OrderSummary(DatedOrder):
    """Order entry of the all-time report."""

    date: datetime
    customer_name: str
    customer_email: str

    @classmethod
    def from_model(cls, order: Order) -> "OrderSummary":
        return cls(
            **DatedOrder.from_model(order).model_dump(),
            date=order.created_at,
            customer_name=order.customer_name or "",
            customer_email=order.customer_email or "",
        )


class EventSummary(CamelSchema):
    """Per-event totals of the all-time report."""

    id: int
    name: str
    total_orders: int
    confirmed_orders: int
    tickets_sold: int
    revenue: float
    occupancy_percentage: float


class AllTimeReport(SalesTotals):
    """Orders of every status since the all-time floor."""

    total_orders: int
    confirmed_orders: int
    orders_data: list[OrderSummary]
    orders_by_date: dict[str, list[DatedOrder]]
    event_summary: list[EventSummary]
    occupancy_by_date: dict[str, float]

    @classmethod
    def empty(cls) -> "AllTimeReport":
        return cls(
            total_orders=0,
            confirmed_orders=0,
            tickets_sold=0,
            revenue=0.0,
            occupancy_percentage=0.0,
            orders_data=[],
            orders_by_date={},
            event_summary=[],
            occupancy_by_date={},
        )


SalesReport = DailyReport | WeeklyReport | MonthlyReport | AllTimeReport
