"""Pydantic schemas for API request/response models."""

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from event_payroll.calculators.engine import EventPayrollResult
from event_payroll.calculators.pay_summary import PaySummary
from event_payroll.calculators.types import PayComponents, round_to_cents


# Amounts and hours are computed unrounded and serialized to cents
Amount = Annotated[
    Decimal,
    PlainSerializer(lambda v: str(round_to_cents(v)), return_type=str, when_used="json"),
]


# ============================================================================
# Event payroll schemas
# ============================================================================


class PayComponentsResponse(BaseModel):
    """Pay breakdown for one worker at one event."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    event_id: UUID
    regime: str
    actual_hours: Amount
    base_rate: Amount
    loaded_rate: Amount
    ext_amt_on_reg_rate: Amount
    commission_amt: Amount
    total_final_commission_amt: Amount
    tips: Amount
    rest_break: Amount
    other_adjustment: Amount
    total_gross_pay: Amount
    prior_week_hours: Amount
    is_weekly_overtime: bool
    ot_rate: Amount

    @classmethod
    def from_components(cls, pay: PayComponents) -> "PayComponentsResponse":
        return cls.model_validate(pay.to_dict())


class EventPayrollResponse(BaseModel):
    """Event payroll breakdown."""

    event_id: UUID
    state_code: str
    regime: str
    base_rate: Amount
    commission_pool: Amount
    commission_per_vendor: Amount
    total_event_hours: Amount
    total_tips: Amount
    total_gross_pay: Amount
    solver_iterations: int | None = None
    solver_converged: bool = True
    calculation_id: UUID | None = None
    workers: list[PayComponentsResponse]

    @classmethod
    def from_result(cls, result: EventPayrollResult) -> "EventPayrollResponse":
        return cls(
            event_id=result.event_id,
            state_code=result.state_code,
            regime=result.regime.value,
            base_rate=result.base_rate,
            commission_pool=result.commission_pool,
            commission_per_vendor=result.commission_per_vendor,
            total_event_hours=result.total_event_hours,
            total_tips=result.total_tips,
            total_gross_pay=result.total_gross_pay,
            solver_iterations=result.solver_iterations,
            solver_converged=result.solver_converged,
            calculation_id=result.calculation_id,
            workers=[PayComponentsResponse.from_components(w) for w in result.workers],
        )


# ============================================================================
# Pay summary schemas
# ============================================================================


class DeductionsInput(BaseModel):
    """Statutory deductions for the period, from the external tax source."""

    federal_income: Decimal = Field(default=Decimal("0"), ge=0)
    social_security: Decimal = Field(default=Decimal("0"), ge=0)
    medicare: Decimal = Field(default=Decimal("0"), ge=0)
    state_income: Decimal = Field(default=Decimal("0"), ge=0)
    state_di: Decimal = Field(default=Decimal("0"), ge=0)
    misc_deduction: Decimal = Field(default=Decimal("0"), ge=0)


class PaySummaryRequest(BaseModel):
    """Request to summarize a worker's pay over a set of events."""

    user_id: UUID
    event_ids: list[UUID] = Field(min_length=1)
    deductions: DeductionsInput = Field(default_factory=DeductionsInput)
    reimbursement: Decimal = Field(default=Decimal("0"), ge=0)


class PaySummaryResponse(BaseModel):
    """Pay period summary for one worker."""

    user_id: UUID
    events: list[PayComponentsResponse]
    total_hours: Amount
    total_tips: Amount
    total_commission: Amount
    total_rest_break: Amount
    total_other: Amount
    gross_pay: Amount
    deductions: DeductionsInput
    total_deductions: Amount
    reimbursement: Amount
    net_pay: Amount
    errors: dict[UUID, str] = Field(default_factory=dict)

    @classmethod
    def from_summary(
        cls, summary: PaySummary, errors: dict[UUID, str]
    ) -> "PaySummaryResponse":
        d = summary.deductions
        return cls(
            user_id=summary.user_id,
            events=[PayComponentsResponse.from_components(p) for p in summary.events],
            total_hours=summary.total_hours,
            total_tips=summary.total_tips,
            total_commission=summary.total_commission,
            total_rest_break=summary.total_rest_break,
            total_other=summary.total_other,
            gross_pay=summary.gross_pay,
            deductions=DeductionsInput(
                federal_income=d.federal_income,
                social_security=d.social_security,
                medicare=d.medicare,
                state_income=d.state_income,
                state_di=d.state_di,
                misc_deduction=d.misc_deduction,
            ),
            total_deductions=summary.total_deductions,
            reimbursement=summary.reimbursement,
            net_pay=summary.net_pay,
            errors=errors,
        )


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str
    code: str | None = None
