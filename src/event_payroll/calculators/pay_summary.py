"""Pay period summary: gross over events, statutory deductions, net pay."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any

from event_payroll.calculators.types import (
    ZERO,
    PayComponents,
    PayrollInputError,
    round_to_cents,
    to_decimal,
)


@dataclass(frozen=True)
class StatutoryDeductions:
    """Withholdings for the period, supplied by the external tax source."""

    federal_income: Decimal = ZERO
    social_security: Decimal = ZERO
    medicare: Decimal = ZERO
    state_income: Decimal = ZERO
    state_di: Decimal = ZERO
    misc_deduction: Decimal = ZERO

    @classmethod
    def from_mapping(cls, values: dict[str, Any] | None) -> StatutoryDeductions:
        """Build from loosely typed input; missing keys are zero.

        Raises:
            PayrollInputError: On non-numeric or negative amounts.
        """
        values = values or {}
        amounts: dict[str, Decimal] = {}
        for f in fields(cls):
            amount = to_decimal(values.get(f.name), f.name)
            if amount < 0:
                raise PayrollInputError(f"{f.name} cannot be negative: {amount}")
            amounts[f.name] = amount
        return cls(**amounts)

    @property
    def total(self) -> Decimal:
        return sum((getattr(self, f.name) for f in fields(self)), ZERO)


@dataclass
class PaySummary:
    """One worker's pay for a pay period."""

    user_id: Any
    events: list[PayComponents] = field(default_factory=list)
    total_hours: Decimal = ZERO
    total_tips: Decimal = ZERO
    total_commission: Decimal = ZERO
    total_rest_break: Decimal = ZERO
    total_other: Decimal = ZERO
    gross_pay: Decimal = ZERO
    deductions: StatutoryDeductions = field(default_factory=StatutoryDeductions)
    total_deductions: Decimal = ZERO
    reimbursement: Decimal = ZERO
    net_pay: Decimal = ZERO


def summarize_pay_period(
    user_id: Any,
    components: Iterable[PayComponents],
    deductions: StatutoryDeductions | None = None,
    reimbursement: Decimal = ZERO,
) -> PaySummary:
    """Sum a worker's per-event pay and apply deductions and reimbursement.

    Totals are accumulated unrounded and rounded to cents once;
    net = gross - deductions + reimbursement.
    """
    deductions = deductions or StatutoryDeductions()
    if reimbursement < 0:
        raise PayrollInputError(f"reimbursement cannot be negative: {reimbursement}")

    events = list(components)
    summary = PaySummary(user_id=user_id, events=events, deductions=deductions)

    hours = tips = commission = rest_break = other = gross = ZERO
    for pay in events:
        hours += pay.actual_hours
        tips += pay.tips
        commission += pay.commission_amt
        rest_break += pay.rest_break
        other += pay.other_adjustment
        gross += pay.total_gross_pay

    summary.total_hours = round_to_cents(hours)
    summary.total_tips = round_to_cents(tips)
    summary.total_commission = round_to_cents(commission)
    summary.total_rest_break = round_to_cents(rest_break)
    summary.total_other = round_to_cents(other)
    summary.gross_pay = round_to_cents(gross)
    summary.total_deductions = round_to_cents(deductions.total)
    summary.reimbursement = round_to_cents(reimbursement)
    summary.net_pay = summary.gross_pay - summary.total_deductions + summary.reimbursement
    return summary
