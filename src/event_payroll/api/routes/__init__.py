"""API routes."""

from event_payroll.api.routes.health import router as health_router
from event_payroll.api.routes.payroll import router as payroll_router

__all__ = ["health_router", "payroll_router"]
