"""Tests for state base rate resolution."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from event_payroll.calculators.rate_resolver import (
    DEFAULT_BASE_RATE,
    RateResolver,
    resolve_base_rate,
)
from event_payroll.models import StateRate


class TestResolveBaseRate:
    """Test the pure lookup with default fallback."""

    def test_configured_state(self):
        assert resolve_base_rate({"AZ": Decimal("14.70")}, "AZ") == Decimal("14.70")

    def test_unconfigured_state_uses_default(self):
        assert resolve_base_rate({"AZ": Decimal("14.70")}, "TX") == DEFAULT_BASE_RATE

    def test_non_positive_rate_uses_default(self):
        assert resolve_base_rate({"NV": Decimal("0")}, "NV") == Decimal("17.28")

    def test_state_name_is_normalized(self):
        assert resolve_base_rate({"AZ": Decimal("14.70")}, "arizona") == Decimal("14.70")


class TestRateResolver:
    """Test rate resolution from the state_rate table."""

    @pytest.mark.asyncio
    async def test_resolve_configured_rate(self, session, state_rates):
        """Test resolving a configured state."""
        resolver = RateResolver(session)

        rate = await resolver.resolve_base_rate("AZ", as_of=date(2026, 1, 14))

        assert rate == Decimal("14.70")

    @pytest.mark.asyncio
    async def test_resolve_unconfigured_state(self, session, state_rates):
        """Test fallback to the default for states with no row."""
        resolver = RateResolver(session, default_base_rate=Decimal("16.00"))

        rate = await resolver.resolve_base_rate("TX", as_of=date(2026, 1, 14))

        assert rate == Decimal("16.00")

    @pytest.mark.asyncio
    async def test_resolve_rate_respects_effective_dates(self, session, state_rates):
        """Test that rate resolution respects effective dates."""
        session.add(
            StateRate(
                state_code="AZ",
                state_name="Arizona",
                base_rate=Decimal("15.50"),
                effective_date=date(2026, 7, 1),
            )
        )
        await session.flush()

        resolver = RateResolver(session)

        before = await resolver.resolve_base_rate("AZ", as_of=date(2026, 6, 30))
        after = await resolver.resolve_base_rate("AZ", as_of=date(2026, 7, 1))

        assert before == Decimal("14.70")
        assert after == Decimal("15.50")

    @pytest.mark.asyncio
    async def test_rate_not_yet_effective_uses_earliest_row(self, session, state_rates):
        """Dates before a state's first row still get that state's rate."""
        resolver = RateResolver(session, default_base_rate=Decimal("16.00"))

        rate = await resolver.resolve_base_rate("AZ", as_of=date(2024, 12, 31))

        assert rate == Decimal("14.70")

    @pytest.mark.asyncio
    async def test_rate_entered_after_past_events(self, session):
        """A rate configured today applies to events from last week."""
        session.add(
            StateRate(
                state_code="AZ",
                state_name="Arizona",
                base_rate=Decimal("14.70"),
                effective_date=date.today(),
            )
        )
        await session.flush()

        resolver = RateResolver(session, default_base_rate=Decimal("17.28"))

        rate = await resolver.resolve_base_rate("AZ", as_of=date.today() - timedelta(days=7))

        assert rate == Decimal("14.70")

    @pytest.mark.asyncio
    async def test_earliest_row_picked_among_future_rows(self, session, state_rates):
        """With several future rows, the first to take effect is used."""
        session.add_all([
            StateRate(
                state_code="WI",
                state_name="Wisconsin",
                base_rate=Decimal("15.50"),
                effective_date=date(2026, 7, 1),
            ),
            StateRate(
                state_code="WI",
                state_name="Wisconsin",
                base_rate=Decimal("15.00"),
                effective_date=date(2026, 1, 1),
            ),
        ])
        await session.flush()

        resolver = RateResolver(session)

        rate = await resolver.resolve_base_rate("WI", as_of=date(2025, 6, 1))

        assert rate == Decimal("15.00")

    @pytest.mark.asyncio
    async def test_non_positive_row_keeps_previous_rate(self, session, state_rates):
        """A zero rate row does not replace the rate before it."""
        session.add(
            StateRate(
                state_code="AZ",
                state_name="Arizona",
                base_rate=Decimal("0"),
                effective_date=date(2026, 1, 1),
            )
        )
        await session.flush()

        resolver = RateResolver(session, default_base_rate=Decimal("16.00"))

        rate = await resolver.resolve_base_rate("AZ", as_of=date(2026, 2, 1))

        assert rate == Decimal("14.70")

    @pytest.mark.asyncio
    async def test_load_configured_rates(self, session, state_rates):
        """Test the per-state mapping."""
        resolver = RateResolver(session)

        rates = await resolver.load_configured_rates()

        assert rates == {"CA": Decimal("17.28"), "AZ": Decimal("14.70")}
