"""Pytest fixtures for event payroll tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from event_payroll.models import Base, Event, EventAssignment, StateRate, TimeEntry

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def state_rates(session: AsyncSession) -> dict[str, StateRate]:
    """Configured base rates for CA and AZ."""
    rates = {
        "CA": StateRate(
            state_code="CA",
            state_name="California",
            base_rate=Decimal("17.28"),
            effective_date=date(2025, 1, 1),
        ),
        "AZ": StateRate(
            state_code="AZ",
            state_name="Arizona",
            base_rate=Decimal("14.70"),
            effective_date=date(2025, 1, 1),
        ),
    }
    session.add_all(rates.values())
    await session.flush()
    return rates


ShiftAdder = Callable[..., Awaitable[None]]


@pytest.fixture
def add_shift(session: AsyncSession) -> ShiftAdder:
    """Store a clock_in/clock_out pair for a user."""

    async def _add_shift(
        user_id: UUID,
        start: datetime,
        end: datetime,
        event_id: UUID | None = None,
    ) -> None:
        session.add_all([
            TimeEntry(user_id=user_id, event_id=event_id, action="clock_in", timestamp=start),
            TimeEntry(user_id=user_id, event_id=event_id, action="clock_out", timestamp=end),
        ])
        await session.flush()

    return _add_shift


@pytest.fixture
def make_event(session: AsyncSession) -> Callable[..., Awaitable[Event]]:
    """Create an event with a team of (user_id, division) members."""

    async def _make_event(
        state: str,
        event_date: date,
        team: list[tuple[UUID, str | None]],
        ticket_sales: Decimal = Decimal("0"),
        tips: Decimal = Decimal("0"),
        tax_rate_percent: Decimal = Decimal("0"),
        commission_pool_percent: Decimal = Decimal("0"),
    ) -> Event:
        event = Event(
            event_id=uuid4(),
            event_name=f"{state} show",
            event_date=event_date,
            state=state,
            ticket_sales=ticket_sales,
            tips=tips,
            tax_rate_percent=tax_rate_percent,
            commission_pool_percent=commission_pool_percent,
        )
        session.add(event)
        await session.flush()

        session.add_all([
            EventAssignment(event_id=event.event_id, user_id=user_id, division=division)
            for user_id, division in team
        ])
        await session.flush()
        return event

    return _make_event
