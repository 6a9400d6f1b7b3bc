"""Event, team assignment and payment adjustment models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from event_payroll.models.base import UUIDPK, Base, Money, TimestampMixin


class Event(Base, TimestampMixin):
    """A staffed event together with its financial inputs."""

    __tablename__ = "event"

    event_id: Mapped[UUIDPK]
    event_name: Mapped[str]
    event_date: Mapped[date]
    state: Mapped[str | None]
    venue: Mapped[str | None]

    # Financial inputs
    ticket_sales: Mapped[Money]
    tips: Mapped[Money]
    tax_rate_percent: Mapped[Decimal] = mapped_column(Numeric(7, 4), default=Decimal("0"))
    # Fraction of net sales, e.g. 0.04 for a 4% pool
    commission_pool_percent: Mapped[Decimal] = mapped_column(Numeric(7, 4), default=Decimal("0"))

    __table_args__ = (
        CheckConstraint("ticket_sales >= 0", name="event_ticket_sales_nonneg"),
        CheckConstraint("tips >= 0", name="event_tips_nonneg"),
    )

    assignments: Mapped[list[EventAssignment]] = relationship(back_populates="event")
    adjustments: Mapped[list[PaymentAdjustment]] = relationship(back_populates="event")


class EventAssignment(Base, TimestampMixin):
    """A worker on an event's team, with the division they work in."""

    __tablename__ = "event_assignment"

    assignment_id: Mapped[UUIDPK]
    event_id: Mapped[UUID] = mapped_column(ForeignKey("event.event_id", ondelete="CASCADE"))
    user_id: Mapped[UUID]
    # vendor, trailers or both; anything else is treated as unassigned
    division: Mapped[str | None]

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="event_assignment_event_user_unique"),
    )

    event: Mapped[Event] = relationship(back_populates="assignments")


class PaymentAdjustment(Base, TimestampMixin):
    """Manual per-worker adjustment to an event's pay, positive or negative."""

    __tablename__ = "payment_adjustment"

    payment_adjustment_id: Mapped[UUIDPK]
    event_id: Mapped[UUID] = mapped_column(
        ForeignKey("event.event_id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[UUID]
    adjustment_amount: Mapped[Money]
    adjustment_note: Mapped[str | None]

    event: Mapped[Event] = relationship(back_populates="adjustments")
