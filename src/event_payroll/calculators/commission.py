"""Event commission pool sizing and distribution."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from event_payroll.calculators.pay_components import MINIMUM_EVENT_PAY, OVERTIME_MULTIPLIER
from event_payroll.calculators.types import (
    ZERO,
    EventFinancials,
    PayRegime,
    WorkerHours,
)
from event_payroll.calculators.weekly_hours import is_weekly_overtime

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
MAX_SOLVER_ITERATIONS = 20
CONVERGENCE_TOLERANCE = Decimal("0.01")


def net_sales(ticket_sales: Decimal, tips: Decimal, tax_rate_percent: Decimal) -> Decimal:
    """Ticket sales net of tips and sales tax."""
    taxable = max(ticket_sales - tips, ZERO)
    return taxable * (1 - tax_rate_percent / HUNDRED)


def commission_pool_dollars(financials: EventFinancials) -> Decimal:
    """Commission pool in dollars for an event."""
    sales = net_sales(financials.ticket_sales, financials.tips, financials.tax_rate_percent)
    return sales * financials.commission_pool_percent


def equal_commission_share(pool: Decimal, eligible_count: int) -> Decimal:
    """Equal split of the pool; nobody eligible means nothing to split."""
    if eligible_count <= 0:
        return ZERO
    return pool / eligible_count


@dataclass(frozen=True)
class CommissionSolution:
    """Outcome of the weekly-overtime commission iteration."""

    commission_per_vendor: Decimal
    iterations: int
    converged: bool


@dataclass
class CommissionDistribution:
    """Commission input for each worker at an event."""

    regime: PayRegime
    pool: Decimal
    eligible_count: int
    commission_per_vendor: Decimal
    shares: dict[Any, Decimal] = field(default_factory=dict)
    solution: CommissionSolution | None = None

    def share_for(self, user_id: Any) -> Decimal:
        return self.shares.get(user_id, ZERO)


def _ext_amt_contribution(worker: WorkerHours, base_rate: Decimal, commission: Decimal) -> Decimal:
    ext_amt_regular = worker.actual_hours * base_rate
    if not is_weekly_overtime(worker.prior_week_hours, worker.actual_hours):
        return ext_amt_regular
    # OT pay is 1.5x the loaded rate, and the loaded rate includes the commission
    return OVERTIME_MULTIPLIER * max(MINIMUM_EVENT_PAY, ext_amt_regular + commission)


def solve_weekly_overtime_commission(
    pool: Decimal,
    workers: Sequence[WorkerHours],
    base_rate: Decimal,
) -> CommissionSolution:
    """Solve the per-vendor commission for a weekly-overtime event.

    Workers in weekly overtime take a slice of the pool that grows with the
    commission itself, so the per-vendor value is found by fixed-point
    iteration:

        next = max(0, (pool - sum(ext amt contributions)) / eligible count)

    starting from zero, stopping when successive values differ by less than a
    cent. After MAX_SOLVER_ITERATIONS the last estimate is returned as is.
    """
    eligible = [w for w in workers if w.commission_eligible and w.actual_hours > 0]
    if not eligible:
        return CommissionSolution(ZERO, 0, True)

    count = len(eligible)
    commission = ZERO
    for iteration in range(1, MAX_SOLVER_ITERATIONS + 1):
        contributions = sum(
            (_ext_amt_contribution(w, base_rate, commission) for w in eligible), ZERO
        )
        next_commission = max(ZERO, (pool - contributions) / count)
        if abs(next_commission - commission) < CONVERGENCE_TOLERANCE:
            return CommissionSolution(next_commission, iteration, True)
        commission = next_commission

    logger.warning(
        "Weekly overtime commission did not converge after %d iterations "
        "(pool=%s, eligible=%d), using last estimate %s",
        MAX_SOLVER_ITERATIONS,
        pool,
        count,
        commission,
    )
    return CommissionSolution(commission, MAX_SOLVER_ITERATIONS, False)


def distribute_commission(
    regime: PayRegime,
    pool: Decimal,
    workers: Sequence[WorkerHours],
    base_rate: Decimal,
) -> CommissionDistribution:
    """Work out every worker's commission input for the pay calculation.

    Standard events split the pool equally among eligible workers, and each
    worker's own extended amount is subtracted later. Weekly-overtime events
    give every eligible worker with hours the solved per-vendor commission.
    """
    if regime is PayRegime.WEEKLY_OVERTIME:
        solution = solve_weekly_overtime_commission(pool, workers, base_rate)
        eligible = [w for w in workers if w.commission_eligible and w.actual_hours > 0]
        return CommissionDistribution(
            regime=regime,
            pool=pool,
            eligible_count=len(eligible),
            commission_per_vendor=solution.commission_per_vendor,
            shares={w.user_id: solution.commission_per_vendor for w in eligible},
            solution=solution,
        )

    eligible = [w for w in workers if w.commission_eligible]
    share = equal_commission_share(pool, len(eligible))
    return CommissionDistribution(
        regime=regime,
        pool=pool,
        eligible_count=len(eligible),
        commission_per_vendor=share,
        shares={w.user_id: share for w in eligible},
    )
