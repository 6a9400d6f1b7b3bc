"""Clock event model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from event_payroll.models.base import UUIDPK, Base, TimestampMixin


class TimeEntry(Base, TimestampMixin):
    """Append-only clock event (clock in/out, meal start/end)."""

    __tablename__ = "time_entry"

    time_entry_id: Mapped[UUIDPK]
    user_id: Mapped[UUID]
    # Entries recorded outside an event still count towards weekly hours
    event_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("event.event_id", ondelete="SET NULL"), index=True
    )
    action: Mapped[str]
    timestamp: Mapped[datetime]

    __table_args__ = (
        CheckConstraint(
            "action IN ('clock_in', 'clock_out', 'meal_start', 'meal_end')",
            name="time_entry_action_check",
        ),
        # Weekly lookback scans one user's entries by time
        Index("ix_time_entry_user_timestamp", "user_id", "timestamp"),
    )
