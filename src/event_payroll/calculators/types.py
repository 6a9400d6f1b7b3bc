"""Type definitions for the event payroll pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

ZERO = Decimal("0")
CENTS = Decimal("0.01")
SECONDS_PER_HOUR = Decimal("3600")


class PayrollInputError(ValueError):
    """Raised when an input value has the wrong shape for a payroll calculation."""


class ClockAction(str, Enum):
    """Time entry actions."""

    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    MEAL_START = "meal_start"
    MEAL_END = "meal_end"


class Division(str, Enum):
    """Division a worker is assigned to on an event."""

    VENDOR = "vendor"
    TRAILERS = "trailers"
    BOTH = "both"

    @classmethod
    def parse(cls, value: str | Division | None) -> Division | None:
        """Normalize a stored division value; unknown values map to None."""
        if isinstance(value, Division):
            return value
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class PayRegime(str, Enum):
    """Pay formula family applied to an event, selected by its state."""

    STANDARD = "standard"
    WEEKLY_OVERTIME = "weekly_overtime"


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """Coerce a numeric input to Decimal.

    None is treated as zero. Floats go through str() so 17.28 stays 17.28.

    Raises:
        PayrollInputError: If the value is not a finite number.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise PayrollInputError(f"{name} must be numeric, got bool")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip() or "0")
        except InvalidOperation as e:
            raise PayrollInputError(f"{name} must be numeric, got {value!r}") from e
    else:
        raise PayrollInputError(f"{name} must be numeric, got {type(value).__name__}")
    if not result.is_finite():
        raise PayrollInputError(f"{name} must be finite, got {value!r}")
    return result


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ClockEntry:
    """A raw time entry as read from the store.

    ``timestamp`` is left unparsed; the aggregator drops values it cannot read.
    """

    action: str
    timestamp: Any
    user_id: Any = None
    event_id: Any = None


@dataclass(frozen=True)
class TimeSpan:
    """A closed time interval."""

    start: datetime
    end: datetime

    @property
    def hours(self) -> Decimal:
        delta = self.end - self.start
        seconds = Decimal(delta.days * 86400 + delta.seconds) + Decimal(delta.microseconds) / 1000000
        return seconds / SECONDS_PER_HOUR


@dataclass
class WorkedTime:
    """Result of aggregating one worker's time entries at one event."""

    actual_hours: Decimal = ZERO
    meal_hours: Decimal = ZERO
    first_clock_in: datetime | None = None
    last_clock_out: datetime | None = None
    work_intervals: list[TimeSpan] = field(default_factory=list)
    meal_spans: list[TimeSpan] = field(default_factory=list)
    # True when meal_spans were inferred from gaps between work intervals
    meals_inferred: bool = False


@dataclass(frozen=True)
class EventFinancials:
    """Financial inputs of an event, read-only to the engine."""

    event_id: Any
    state_code: str
    ticket_sales: Decimal = ZERO
    tips: Decimal = ZERO
    tax_rate_percent: Decimal = ZERO
    commission_pool_percent: Decimal = ZERO


@dataclass(frozen=True)
class WorkerHours:
    """Per-worker inputs for one event."""

    user_id: Any
    actual_hours: Decimal
    division: Division | None = None
    prior_week_hours: Decimal = ZERO
    explicit_tips: Decimal = ZERO
    other_adjustment: Decimal = ZERO

    @property
    def commission_eligible(self) -> bool:
        """Trailers division is excluded from commission pooling."""
        return self.division is not Division.TRAILERS


@dataclass(frozen=True)
class PayInput:
    """Inputs to the pay component calculation for one worker at one event.

    ``commission_share`` is the equal pool share in the standard regime and the
    solved per-vendor commission in the weekly-overtime regime.
    """

    regime: PayRegime
    state_code: str
    actual_hours: Decimal
    base_rate: Decimal
    commission_share: Decimal = ZERO
    commission_eligible: bool = True
    prior_week_hours: Decimal = ZERO
    total_event_tips: Decimal = ZERO
    total_event_hours: Decimal = ZERO
    explicit_tips: Decimal = ZERO
    other_adjustment: Decimal = ZERO


@dataclass
class PayComponents:
    """Pay breakdown for one worker at one event."""

    regime: PayRegime
    actual_hours: Decimal
    base_rate: Decimal
    loaded_rate: Decimal
    ext_amt_on_reg_rate: Decimal
    commission_amt: Decimal
    total_final_commission_amt: Decimal
    tips: Decimal
    rest_break: Decimal
    other_adjustment: Decimal
    total_gross_pay: Decimal
    prior_week_hours: Decimal = ZERO
    is_weekly_overtime: bool = False
    ot_rate: Decimal = ZERO
    user_id: Any = None
    event_id: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dict with the regime as its string value."""
        data = asdict(self)
        data["regime"] = self.regime.value
        return data
