"""State base rate resolution with default fallback."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from event_payroll.calculators.pay_components import normalize_state_code
from event_payroll.config import get_settings
from event_payroll.models import StateRate

logger = logging.getLogger(__name__)

DEFAULT_BASE_RATE = Decimal("17.28")


def resolve_base_rate(
    configured: Mapping[str, Decimal],
    state_code: str | None,
    default: Decimal = DEFAULT_BASE_RATE,
) -> Decimal:
    """Look up a state's base rate, falling back to ``default``.

    A missing or non-positive configured rate counts as unconfigured.
    """
    code = normalize_state_code(state_code)
    rate = configured.get(code)
    if rate is not None and rate > 0:
        return Decimal(rate)
    logger.debug("No base rate configured for %s, using default %s", code, default)
    return default


class RateResolver:
    """Resolves state base rates from the state_rate table.

    Rate selection per state:
    1. Latest row effective on or before ``as_of`` (latest overall when no date is given)
    2. Otherwise the earliest configured row for the state
    3. Non-positive rates are ignored
    4. States with no usable row get the default base rate
    """

    def __init__(self, session: AsyncSession, default_base_rate: Decimal | None = None):
        self.session = session
        self.default_base_rate = (
            default_base_rate
            if default_base_rate is not None
            else get_settings().default_base_rate
        )

    async def load_configured_rates(self, as_of: date | None = None) -> dict[str, Decimal]:
        """Get the effective base rate per state code."""
        result = await self.session.execute(
            select(StateRate).order_by(StateRate.state_code, StateRate.effective_date)
        )

        effective: dict[str, Decimal] = {}
        earliest: dict[str, Decimal] = {}
        for row in result.scalars().all():
            if row.base_rate is None or row.base_rate <= 0:
                continue
            code = normalize_state_code(row.state_code)
            rate = Decimal(row.base_rate)
            earliest.setdefault(code, rate)
            # Rows arrive in effective_date order, so the last one seen wins
            if as_of is None or row.effective_date <= as_of:
                effective[code] = rate

        return {**earliest, **effective}

    async def resolve_base_rate(
        self, state_code: str | None, as_of: date | None = None
    ) -> Decimal:
        """Resolve the base rate for one state."""
        rates = await self.load_configured_rates(as_of)
        return resolve_base_rate(rates, state_code, self.default_base_rate)
