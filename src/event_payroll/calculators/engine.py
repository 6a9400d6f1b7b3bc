"""Event payroll engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from event_payroll.calculators.commission import commission_pool_dollars, distribute_commission
from event_payroll.calculators.pay_components import (
    compute_pay_components,
    normalize_state_code,
    regime_for_state,
)
from event_payroll.calculators.pay_summary import (
    PaySummary,
    StatutoryDeductions,
    summarize_pay_period,
)
from event_payroll.calculators.rate_resolver import RateResolver
from event_payroll.calculators.time_entries import aggregate_time_entries
from event_payroll.calculators.types import (
    ZERO,
    Division,
    EventFinancials,
    PayComponents,
    PayInput,
    PayRegime,
    WorkerHours,
    to_decimal,
)
from event_payroll.calculators.weekly_hours import WeeklyHoursResolver
from event_payroll.config import get_settings
from event_payroll.models import Event, EventAssignment, PaymentAdjustment, TimeEntry

logger = logging.getLogger(__name__)


class EventNotFoundError(Exception):
    """Raised when an event id does not exist."""

    def __init__(self, event_id: UUID):
        self.event_id = event_id
        super().__init__(f"Event {event_id} not found")


@dataclass(frozen=True)
class EventPayrollInput:
    """Everything needed to compute one event's payroll."""

    financials: EventFinancials
    base_rate: Decimal
    workers: list[WorkerHours]
    event_date: date | None = None


@dataclass
class EventPayrollResult:
    """Pay breakdown for every worker at one event."""

    event_id: Any
    state_code: str
    regime: PayRegime
    base_rate: Decimal
    commission_pool: Decimal
    commission_per_vendor: Decimal
    total_event_hours: Decimal
    total_tips: Decimal
    workers: list[PayComponents] = field(default_factory=list)
    solver_iterations: int | None = None
    solver_converged: bool = True
    inputs_fingerprint: str = ""
    calculation_id: UUID | None = None

    @property
    def total_gross_pay(self) -> Decimal:
        return sum((w.total_gross_pay for w in self.workers), ZERO)

    def for_user(self, user_id: Any) -> PayComponents | None:
        for pay in self.workers:
            if pay.user_id == user_id:
                return pay
        return None


@dataclass
class PayrollBatchResult:
    """Result of computing several events; failures are kept per event."""

    results: dict[UUID, EventPayrollResult] = field(default_factory=dict)
    errors: dict[UUID, str] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return len(self.errors)


@dataclass
class PayPeriodResult:
    """A worker's pay period summary plus events that could not be computed."""

    summary: PaySummary
    errors: dict[UUID, str] = field(default_factory=dict)


def compute_event_payroll(payroll_input: EventPayrollInput) -> EventPayrollResult:
    """Compute every worker's pay components for one event.

    Pure: the same input always yields the same result.
    """
    financials = payroll_input.financials
    state_code = normalize_state_code(financials.state_code)
    regime = regime_for_state(state_code)
    base_rate = payroll_input.base_rate

    # Clock-out before clock-in never yields negative pay
    workers = [
        replace(w, actual_hours=max(ZERO, w.actual_hours)) for w in payroll_input.workers
    ]
    if regime is PayRegime.STANDARD:
        workers = [replace(w, prior_week_hours=ZERO) for w in workers]

    pool = commission_pool_dollars(financials)
    distribution = distribute_commission(regime, pool, workers, base_rate)
    total_hours = sum((w.actual_hours for w in workers), ZERO)

    components: list[PayComponents] = []
    for worker in workers:
        pay = compute_pay_components(
            PayInput(
                regime=regime,
                state_code=state_code,
                actual_hours=worker.actual_hours,
                base_rate=base_rate,
                commission_share=distribution.share_for(worker.user_id),
                commission_eligible=worker.commission_eligible,
                prior_week_hours=worker.prior_week_hours,
                total_event_tips=financials.tips,
                total_event_hours=total_hours,
                explicit_tips=worker.explicit_tips,
                other_adjustment=worker.other_adjustment,
            )
        )
        pay.user_id = worker.user_id
        pay.event_id = financials.event_id
        components.append(pay)

    solution = distribution.solution
    return EventPayrollResult(
        event_id=financials.event_id,
        state_code=state_code,
        regime=regime,
        base_rate=base_rate,
        commission_pool=pool,
        commission_per_vendor=distribution.commission_per_vendor,
        total_event_hours=total_hours,
        total_tips=financials.tips,
        workers=components,
        solver_iterations=solution.iterations if solution else None,
        solver_converged=solution.converged if solution else True,
    )


class PayrollEngine:
    """Event payroll engine.

    Calculation pipeline (per event):
    1) Load event financials, team assignments, time entries, adjustments
    2) Resolve the state base rate (default when unconfigured)
    3) Aggregate each worker's time entries into actual hours
    4) Weekly-overtime states: load each worker's prior hours this week
    5) Size the commission pool and distribute it per the pay regime
    6) Compute each worker's pay components

    The engine only reads from the store.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.rate_resolver = RateResolver(session)
        self.weekly_hours = WeeklyHoursResolver(session)
        self.settings = get_settings()

    async def calculate_event(self, event_id: UUID) -> EventPayrollResult:
        """Compute payroll for one event.

        Raises:
            EventNotFoundError: If the event does not exist.
        """
        event = await self._load_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        payroll_input = await self._build_event_input(event)
        result = compute_event_payroll(payroll_input)
        result.inputs_fingerprint = self._compute_inputs_fingerprint(payroll_input)
        result.calculation_id = self._generate_calculation_id(
            event.event_id, result.inputs_fingerprint
        )
        return result

    async def calculate_events(self, event_ids: Sequence[UUID]) -> PayrollBatchResult:
        """Compute several events; one failing event does not stop the rest."""
        batch = PayrollBatchResult()
        for event_id in dict.fromkeys(event_ids):
            try:
                batch.results[event_id] = await self.calculate_event(event_id)
            except EventNotFoundError as e:
                batch.errors[event_id] = str(e)
            except Exception as e:
                logger.exception("Payroll calculation failed for event %s", event_id)
                batch.errors[event_id] = f"Unexpected error: {e}"
        return batch

    async def calculate_pay_summary(
        self,
        user_id: UUID,
        event_ids: Sequence[UUID],
        deductions: StatutoryDeductions | None = None,
        reimbursement: Decimal = ZERO,
    ) -> PayPeriodResult:
        """Summarize one worker's pay over the events of a pay period."""
        batch = await self.calculate_events(event_ids)

        components: list[PayComponents] = []
        for result in batch.results.values():
            pay = result.for_user(user_id)
            if pay is not None:
                components.append(pay)

        summary = summarize_pay_period(user_id, components, deductions, reimbursement)
        return PayPeriodResult(summary=summary, errors=batch.errors)

    async def _build_event_input(self, event: Event) -> EventPayrollInput:
        """Assemble the pure computation input from stored rows."""
        financials = EventFinancials(
            event_id=event.event_id,
            state_code=normalize_state_code(event.state),
            ticket_sales=to_decimal(event.ticket_sales, "ticket_sales"),
            tips=to_decimal(event.tips, "tips"),
            tax_rate_percent=to_decimal(event.tax_rate_percent, "tax_rate_percent"),
            commission_pool_percent=to_decimal(
                event.commission_pool_percent, "commission_pool_percent"
            ),
        )

        assignments = await self._get_assignments(event.event_id)
        entries = await self._get_time_entries(event.event_id)
        adjustments = await self._get_adjustments(event.event_id)
        base_rate = await self.rate_resolver.resolve_base_rate(
            financials.state_code, as_of=event.event_date
        )

        divisions: dict[UUID, str | None] = {a.user_id: a.division for a in assignments}
        entries_by_user: dict[UUID, list[TimeEntry]] = defaultdict(list)
        for entry in entries:
            entries_by_user[entry.user_id].append(entry)

        # Team members first, then anyone who clocked in without an assignment
        user_ids = list(divisions)
        user_ids.extend(uid for uid in entries_by_user if uid not in divisions)

        other_by_user: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
        for adj in adjustments:
            other_by_user[adj.user_id] += to_decimal(adj.adjustment_amount, "adjustment_amount")

        prior_hours: dict[UUID, Decimal] = {}
        if regime_for_state(financials.state_code) is PayRegime.WEEKLY_OVERTIME:
            prior_hours = await self.weekly_hours.resolve(user_ids, event.event_date)

        workers = [
            WorkerHours(
                user_id=user_id,
                actual_hours=aggregate_time_entries(entries_by_user.get(user_id, [])).actual_hours,
                division=Division.parse(divisions.get(user_id)),
                prior_week_hours=prior_hours.get(user_id, ZERO),
                other_adjustment=other_by_user.get(user_id, ZERO),
            )
            for user_id in user_ids
        ]

        return EventPayrollInput(
            financials=financials,
            base_rate=base_rate,
            workers=workers,
            event_date=event.event_date,
        )

    def _compute_inputs_fingerprint(self, payroll_input: EventPayrollInput) -> str:
        """Compute fingerprint of all inputs used in calculation."""
        f = payroll_input.financials
        data = {
            "event_id": str(f.event_id),
            "state_code": f.state_code,
            "ticket_sales": str(f.ticket_sales),
            "tips": str(f.tips),
            "tax_rate_percent": str(f.tax_rate_percent),
            "commission_pool_percent": str(f.commission_pool_percent),
            "base_rate": str(payroll_input.base_rate),
            "workers": sorted(
                (
                    {
                        "user_id": str(w.user_id),
                        "actual_hours": str(w.actual_hours),
                        "division": w.division.value if w.division else None,
                        "prior_week_hours": str(w.prior_week_hours),
                        "other_adjustment": str(w.other_adjustment),
                    }
                    for w in payroll_input.workers
                ),
                key=lambda item: item["user_id"],
            ),
        }
        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    def _generate_calculation_id(self, event_id: UUID, inputs_fingerprint: str) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "event_id": str(event_id),
            "engine_version": self.settings.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

    # === Data Loading Methods ===

    async def _load_event(self, event_id: UUID) -> Event | None:
        result = await self.session.execute(select(Event).where(Event.event_id == event_id))
        return result.scalar_one_or_none()

    async def _get_assignments(self, event_id: UUID) -> list[EventAssignment]:
        result = await self.session.execute(
            select(EventAssignment)
            .where(EventAssignment.event_id == event_id)
            .order_by(EventAssignment.created_at, EventAssignment.user_id)
        )
        return list(result.scalars().all())

    async def _get_time_entries(self, event_id: UUID) -> list[TimeEntry]:
        result = await self.session.execute(
            select(TimeEntry)
            .where(TimeEntry.event_id == event_id)
            .order_by(TimeEntry.timestamp)
        )
        return list(result.scalars().all())

    async def _get_adjustments(self, event_id: UUID) -> list[PaymentAdjustment]:
        result = await self.session.execute(
            select(PaymentAdjustment).where(PaymentAdjustment.event_id == event_id)
        )
        return list(result.scalars().all())
