"""Seed script for state base rates.

Run with:
    python scripts/seed_state_rates.py

Creates the default base rate for each state the company staffs events in.
Existing rows for the same state and effective date are left untouched.
"""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from event_payroll.database import create_tables, dispose_db, get_session
from event_payroll.models import StateRate

DEFAULT_STATE_RATES = [
    ("CA", "California", Decimal("17.28")),
    ("NY", "New York", Decimal("17.00")),
    ("AZ", "Arizona", Decimal("14.70")),
    ("WI", "Wisconsin", Decimal("15.00")),
]


async def seed_state_rates(session: AsyncSession, effective_date: date) -> int:
    """Insert missing state rates; returns the number created."""
    created = 0
    for state_code, state_name, base_rate in DEFAULT_STATE_RATES:
        result = await session.execute(
            select(StateRate).where(
                StateRate.state_code == state_code,
                StateRate.effective_date == effective_date,
            )
        )
        if result.scalar_one_or_none() is not None:
            print(f"{state_code} rate for {effective_date} already exists")
            continue

        session.add(
            StateRate(
                state_code=state_code,
                state_name=state_name,
                base_rate=base_rate,
                effective_date=effective_date,
            )
        )
        created += 1
        print(f"Created {state_code} base rate {base_rate}")
    return created


async def main() -> None:
    await create_tables()
    try:
        async with get_session() as session:
            created = await seed_state_rates(session, date.today())
    finally:
        await dispose_db()
    print(f"Seeded {created} state rates")


if __name__ == "__main__":
    asyncio.run(main())
