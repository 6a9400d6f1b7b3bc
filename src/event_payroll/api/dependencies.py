"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from event_payroll.calculators.engine import PayrollEngine
from event_payroll.database import init_db


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Read-only session per request; nothing is ever committed."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_payroll_engine(db: DbSession) -> PayrollEngine:
    """Payroll engine bound to the request's session."""
    return PayrollEngine(db)


# Type aliases for cleaner dependency injection
Engine = Annotated[PayrollEngine, Depends(get_payroll_engine)]
