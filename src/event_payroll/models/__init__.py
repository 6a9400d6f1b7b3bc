"""ORM models."""

from event_payroll.models.base import Base, TimestampMixin
from event_payroll.models.event import Event, EventAssignment, PaymentAdjustment
from event_payroll.models.rates import StateRate
from event_payroll.models.time_entry import TimeEntry

__all__ = [
    "Base",
    "TimestampMixin",
    "Event",
    "EventAssignment",
    "PaymentAdjustment",
    "StateRate",
    "TimeEntry",
]
