"""Shared builders for test data."""

from datetime import datetime, timedelta
from decimal import Decimal

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.auth import Principal, Role
from eventdesk.models import (
    ApprovalStatus,
    AuditoriumSchedule,
    Event,
    Order,
    OrderStatus,
    OrderTicket,
)

# Wednesday
NOW = datetime(2025, 3, 12, 10, 0, 0)

ADMIN = Principal(user_id="admin-1", role=Role.ADMIN)
ORGANIZER = Principal(user_id="org-1", role=Role.EVENT_ORGANIZER)
OTHER_ORGANIZER = Principal(user_id="org-2", role=Role.EVENT_ORGANIZER)


def headers_for(principal: Principal) -> dict[str, str]:
    return {"X-User-ID": principal.user_id, "X-User-Role": principal.role.value}


async def create_event(
    db: AsyncSession,
    name: str = "Spring Concert",
    *,
    owner: str = ORGANIZER.user_id,
    when: datetime = datetime(2025, 3, 20, 19, 0),
    total_seats: int = 100,
    available_seats: int | None = None,
    approval: ApprovalStatus = ApprovalStatus.APPROVED,
) -> Event:
    event = Event(
        name=name,
        date=when,
        time=f"{when:%H:%M}",
        location="Main Auditorium",
        total_seats=total_seats,
        available_seats=total_seats if available_seats is None else available_seats,
        approval_status=approval,
        created_by=owner,
    )
    db.add(event)
    await db.commit()
    return event


async def create_order(
    db: AsyncSession,
    event: Event,
    *,
    created_at: datetime,
    quantities: tuple[int, ...] = (1,),
    amount: str = "100.00",
    status: OrderStatus = OrderStatus.CONFIRMED,
    customer_name: str | None = "Dana Putri",
) -> Order:
    order = Order(
        user_id="customer-1",
        event=event,
        total_amount=Decimal(amount),
        status=status,
        customer_name=customer_name,
        customer_email="dana@example.com" if customer_name else None,
        created_at=created_at,
        tickets=[
            OrderTicket(
                ticket_type="Regular",
                quantity=quantity,
                seats=[{"row": 1, "column": i + 1} for i in range(quantity)],
                price=Decimal(amount) / max(quantity, 1),
            )
            for quantity in quantities
        ],
    )
    db.add(order)
    await db.commit()
    return order


async def create_schedule(
    db: AsyncSession,
    event: Event,
    start: datetime,
    hours: float,
    booked_by: str = ADMIN.user_id,
) -> AuditoriumSchedule:
    schedule = AuditoriumSchedule(
        event=event,
        booked_by=booked_by,
        start_time=start,
        end_time=start + timedelta(hours=hours),
    )
    db.add(schedule)
    await db.commit()
    return schedule


class StubRedis:
    """In-memory stand-in for the two Redis calls the lock makes."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    def register_script(self, script):
        async def release(keys, args):
            if self.store.get(keys[0]) == args[0]:
                del self.store[keys[0]]
                return 1
            return 0

        return release


class UnreachableRedis(StubRedis):
    """Redis stand-in whose server refuses every connection."""

    async def set(self, key, value, nx=False, ex=None):
        raise redis.ConnectionError("Connection refused")
