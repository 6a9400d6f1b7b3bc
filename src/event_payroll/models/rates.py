"""State rate configuration model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from event_payroll.models.base import UUIDPK, Base, TimestampMixin


class StateRate(Base, TimestampMixin):
    """Base hourly rate configured for a state, effective from a date."""

    __tablename__ = "state_rate"

    state_rate_id: Mapped[UUIDPK]
    state_code: Mapped[str] = mapped_column(String(2))
    state_name: Mapped[str]
    base_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    effective_date: Mapped[date]

    __table_args__ = (
        UniqueConstraint("state_code", "effective_date", name="state_rate_code_date_unique"),
        CheckConstraint("base_rate >= 0", name="state_rate_base_rate_nonneg"),
    )
