"""Event payroll calculation engine."""

from event_payroll.calculators.commission import (
    commission_pool_dollars,
    distribute_commission,
    solve_weekly_overtime_commission,
)
from event_payroll.calculators.engine import (
    EventNotFoundError,
    EventPayrollResult,
    PayrollEngine,
    compute_event_payroll,
)
from event_payroll.calculators.pay_components import compute_pay_components
from event_payroll.calculators.pay_summary import StatutoryDeductions, summarize_pay_period
from event_payroll.calculators.rate_resolver import RateResolver
from event_payroll.calculators.time_entries import aggregate_time_entries
from event_payroll.calculators.weekly_hours import WeeklyHoursResolver, prior_week_hours

__all__ = [
    "EventNotFoundError",
    "EventPayrollResult",
    "PayrollEngine",
    "RateResolver",
    "StatutoryDeductions",
    "WeeklyHoursResolver",
    "aggregate_time_entries",
    "commission_pool_dollars",
    "compute_event_payroll",
    "compute_pay_components",
    "distribute_commission",
    "prior_week_hours",
    "solve_weekly_overtime_commission",
    "summarize_pay_period",
]
