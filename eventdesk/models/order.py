"""Order models."""

import enum
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdesk.models.base import Base, BigIntPK

if TYPE_CHECKING:
    from eventdesk.models.event import Event


class OrderStatus(str, enum.Enum):
    """Order status enum."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Order(Base):
    """Order placed by a user for tickets of one event."""

    __tablename__ = "orders"

    order_id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(50), nullable=False)
    event_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("events.event_id"), nullable=False
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus), default=OrderStatus.PENDING
    )
    customer_name: Mapped[str | None] = mapped_column(String(255))
    customer_email: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )

    # Relationships
    event: Mapped["Event"] = relationship("Event", back_populates="orders")
    tickets: Mapped[list["OrderTicket"]] = relationship(
        "OrderTicket", back_populates="order", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_orders_event_status", "event_id", "status"),
        Index("idx_orders_created_at", "created_at"),
    )

    @property
    def ticket_count(self) -> int:
        """Number of tickets across all line items."""
        return sum(line.quantity for line in self.tickets)


class OrderTicket(Base):
    """Ticket line item of an order."""

    __tablename__ = "order_tickets"

    order_ticket_id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, autoincrement=True
    )
    order_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("orders.order_id"), nullable=False
    )
    ticket_type: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # [{"row": 1, "column": 4}, ...]
    seats: Mapped[list[dict]] = mapped_column(JSON, default=list)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Relationships
    order: Mapped["Order"] = relationship("Order", back_populates="tickets")
