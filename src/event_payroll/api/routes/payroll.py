"""Event payroll and pay summary endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, status

from event_payroll.api.dependencies import Engine
from event_payroll.api.schemas import (
    ErrorResponse,
    EventPayrollResponse,
    PaySummaryRequest,
    PaySummaryResponse,
)
from event_payroll.calculators.engine import EventNotFoundError
from event_payroll.calculators.pay_summary import StatutoryDeductions

router = APIRouter(tags=["payroll"])


@router.get(
    "/events/{event_id}/payroll",
    response_model=EventPayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_event_payroll(
    engine: Engine,
    event_id: Annotated[UUID, Path()],
) -> EventPayrollResponse:
    """Compute the pay breakdown of every worker at an event."""
    try:
        result = await engine.calculate_event(event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return EventPayrollResponse.from_result(result)


@router.post(
    "/pay-summaries",
    response_model=PaySummaryResponse,
    responses={422: {"model": ErrorResponse}},
)
async def create_pay_summary(
    engine: Engine,
    payload: PaySummaryRequest,
) -> PaySummaryResponse:
    """Summarize a worker's gross and net pay over a pay period's events.

    Events that fail to compute are listed in ``errors`` and left out of the
    totals.
    """
    deductions = StatutoryDeductions.from_mapping(payload.deductions.model_dump())
    result = await engine.calculate_pay_summary(
        payload.user_id,
        payload.event_ids,
        deductions=deductions,
        reimbursement=payload.reimbursement,
    )
    return PaySummaryResponse.from_summary(result.summary, result.errors)
