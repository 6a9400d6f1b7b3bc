"""Per-worker, per-event pay component calculation.

Two pay regimes exist, selected by the event's state:

- STANDARD: extended amount at 1.5x the base rate, commission is whatever the
  worker's pool share exceeds that amount by, plus a rest break premium in
  states that require one.
- WEEKLY_OVERTIME (AZ, NY): extended amount at the base rate, commission comes
  pre-solved from the pool distributor, and a worker pushed over 40 weekly
  hours by this event is paid 1.5x their loaded rate for the whole event.

Both regimes apply the $150 minimum event pay floor.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal

from event_payroll.calculators.types import (
    ZERO,
    PayComponents,
    PayInput,
    PayRegime,
)
from event_payroll.calculators.weekly_hours import is_weekly_overtime

OVERTIME_MULTIPLIER = Decimal("1.5")
MINIMUM_EVENT_PAY = Decimal("150")

REST_BREAK_SHORT_SHIFT = Decimal("9")
REST_BREAK_LONG_SHIFT = Decimal("12")
REST_BREAK_LONG_SHIFT_HOURS = Decimal("10")

DEFAULT_STATE_CODE = "CA"
WEEKLY_OVERTIME_STATES = frozenset({"AZ", "NY"})
NO_REST_BREAK_STATES = frozenset({"NV", "WI", "AZ", "NY"})

STATE_NAME_CODES = {
    "ARIZONA": "AZ",
    "CALIFORNIA": "CA",
    "NEVADA": "NV",
    "NEW YORK": "NY",
    "WISCONSIN": "WI",
}


def normalize_state_code(state: str | None) -> str:
    """Upper-case a state code, mapping known full names; blank means CA."""
    code = (state or "").strip().upper()
    if not code:
        return DEFAULT_STATE_CODE
    return STATE_NAME_CODES.get(code, code)


def regime_for_state(state: str | None) -> PayRegime:
    """Pay regime applied to events in the given state."""
    if normalize_state_code(state) in WEEKLY_OVERTIME_STATES:
        return PayRegime.WEEKLY_OVERTIME
    return PayRegime.STANDARD


def rest_break_amount(actual_hours: Decimal, state: str | None) -> Decimal:
    """Flat rest break premium for a shift."""
    if normalize_state_code(state) in NO_REST_BREAK_STATES:
        return ZERO
    if actual_hours <= 0:
        return ZERO
    if actual_hours >= REST_BREAK_LONG_SHIFT_HOURS:
        return REST_BREAK_LONG_SHIFT
    return REST_BREAK_SHORT_SHIFT


def prorated_tips(pay_input: PayInput) -> Decimal:
    """Worker's share of the event tips pool, by hours worked."""
    if pay_input.total_event_hours > 0 and pay_input.total_event_tips > 0:
        return pay_input.total_event_tips * pay_input.actual_hours / pay_input.total_event_hours
    return pay_input.explicit_tips


def floored_event_pay(actual_hours: Decimal, amount: Decimal) -> Decimal:
    """Apply the minimum event pay floor; no hours means no pay."""
    if actual_hours <= 0:
        return ZERO
    return max(MINIMUM_EVENT_PAY, amount)


def _standard(pay_input: PayInput) -> PayComponents:
    hours = pay_input.actual_hours
    ext_amt = hours * pay_input.base_rate * OVERTIME_MULTIPLIER

    commission_amt = ZERO
    if hours > 0 and pay_input.commission_eligible:
        commission_amt = max(ZERO, pay_input.commission_share - ext_amt)
        # Commission either clears the extended amount or counts for nothing
        if ZERO < commission_amt < ext_amt:
            commission_amt = ZERO

    total_final = floored_event_pay(hours, ext_amt + commission_amt)
    loaded_rate = total_final / hours if hours > 0 else pay_input.base_rate

    return _with_tail(
        pay_input,
        loaded_rate=loaded_rate,
        ext_amt_on_reg_rate=ext_amt,
        commission_amt=commission_amt,
        total_final_commission_amt=total_final,
        rest_break=rest_break_amount(hours, pay_input.state_code),
        weekly_overtime=False,
        ot_rate=ZERO,
    )


def _weekly_overtime(pay_input: PayInput) -> PayComponents:
    hours = pay_input.actual_hours
    ext_amt_regular = hours * pay_input.base_rate

    commission_amt = ZERO
    if hours > 0 and pay_input.commission_eligible:
        commission_amt = pay_input.commission_share

    total_final_base = floored_event_pay(hours, ext_amt_regular + commission_amt)
    loaded_rate_base = total_final_base / hours if hours > 0 else pay_input.base_rate

    weekly_overtime = hours > 0 and is_weekly_overtime(pay_input.prior_week_hours, hours)
    if weekly_overtime:
        ot_rate = loaded_rate_base * OVERTIME_MULTIPLIER
        ext_amt = ot_rate * hours
        # The OT rate already carries the commission; it is not added again
        total_final = ext_amt
    else:
        ot_rate = ZERO
        ext_amt = ext_amt_regular
        total_final = total_final_base

    return _with_tail(
        pay_input,
        loaded_rate=loaded_rate_base,
        ext_amt_on_reg_rate=ext_amt,
        commission_amt=commission_amt,
        total_final_commission_amt=total_final,
        rest_break=ZERO,
        weekly_overtime=weekly_overtime,
        ot_rate=ot_rate,
    )


def _with_tail(
    pay_input: PayInput,
    *,
    loaded_rate: Decimal,
    ext_amt_on_reg_rate: Decimal,
    commission_amt: Decimal,
    total_final_commission_amt: Decimal,
    rest_break: Decimal,
    weekly_overtime: bool,
    ot_rate: Decimal,
) -> PayComponents:
    tips = prorated_tips(pay_input)
    total_gross = total_final_commission_amt + tips + rest_break + pay_input.other_adjustment
    return PayComponents(
        regime=pay_input.regime,
        actual_hours=pay_input.actual_hours,
        base_rate=pay_input.base_rate,
        loaded_rate=loaded_rate,
        ext_amt_on_reg_rate=ext_amt_on_reg_rate,
        commission_amt=commission_amt,
        total_final_commission_amt=total_final_commission_amt,
        tips=tips,
        rest_break=rest_break,
        other_adjustment=pay_input.other_adjustment,
        total_gross_pay=total_gross,
        prior_week_hours=pay_input.prior_week_hours,
        is_weekly_overtime=weekly_overtime,
        ot_rate=ot_rate,
    )


REGIME_CALCULATORS: dict[PayRegime, Callable[[PayInput], PayComponents]] = {
    PayRegime.STANDARD: _standard,
    PayRegime.WEEKLY_OVERTIME: _weekly_overtime,
}


def compute_pay_components(pay_input: PayInput) -> PayComponents:
    """Compute the pay breakdown for one worker at one event."""
    return REGIME_CALCULATORS[pay_input.regime](pay_input)
