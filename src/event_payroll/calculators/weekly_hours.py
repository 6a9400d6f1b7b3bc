"""Weekly hours lookback for weekly-overtime states."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from event_payroll.calculators.time_entries import order_entries, pair_spans, sum_hours
from event_payroll.calculators.types import ZERO, ClockAction, PayrollInputError
from event_payroll.models import TimeEntry

WEEKLY_OVERTIME_THRESHOLD = Decimal("40")


def coerce_date(value: date | datetime | str) -> date:
    """Normalize an event date; datetimes and ISO strings keep only the date part."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as e:
            raise PayrollInputError(f"Invalid event date {value!r}") from e
    raise PayrollInputError(f"Invalid event date {value!r}")


def monday_of_week(day: date) -> date:
    """Monday of the calendar week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_window(event_date: date) -> tuple[datetime, datetime]:
    """UTC window from Monday 00:00 up to (not including) the event date 00:00."""
    start = datetime.combine(monday_of_week(event_date), time.min, tzinfo=timezone.utc)
    end = datetime.combine(event_date, time.min, tzinfo=timezone.utc)
    return start, end


def prior_week_hours(entries: Iterable[Any], event_date: date | datetime | str) -> Decimal:
    """Hours clocked earlier in the event's week, across all events.

    An event on a Monday has no prior hours by definition, whatever is stored.
    Meal markers are ignored; clock pairs are formed within the window only.
    """
    day = coerce_date(event_date)
    if day.weekday() == 0:
        return ZERO

    start, end = week_window(day)
    window = [
        (timestamp, action)
        for timestamp, action in order_entries(entries)
        if start <= timestamp < end
        and action in (ClockAction.CLOCK_IN, ClockAction.CLOCK_OUT)
    ]
    return sum_hours(pair_spans(window, ClockAction.CLOCK_IN, ClockAction.CLOCK_OUT))


def is_weekly_overtime(prior_hours: Decimal, actual_hours: Decimal) -> bool:
    """Whether this event takes the worker past the weekly threshold."""
    return prior_hours + actual_hours > WEEKLY_OVERTIME_THRESHOLD


class WeeklyHoursResolver:
    """Loads prior-week hours for the workers of one event."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def resolve(
        self,
        user_ids: Sequence[UUID],
        event_date: date | datetime | str,
    ) -> dict[UUID, Decimal]:
        """Return prior-week hours per user (zero for users with no entries)."""
        day = coerce_date(event_date)
        hours: dict[UUID, Decimal] = {user_id: ZERO for user_id in user_ids}
        if not user_ids or day.weekday() == 0:
            return hours

        start, end = week_window(day)
        result = await self.session.execute(
            select(TimeEntry)
            .where(
                TimeEntry.user_id.in_(list(user_ids)),
                TimeEntry.timestamp >= start,
                TimeEntry.timestamp < end,
                TimeEntry.action.in_(
                    [ClockAction.CLOCK_IN.value, ClockAction.CLOCK_OUT.value]
                ),
            )
            .order_by(TimeEntry.timestamp)
        )

        by_user: dict[UUID, list[TimeEntry]] = defaultdict(list)
        for entry in result.scalars().all():
            by_user[entry.user_id].append(entry)

        for user_id, entries in by_user.items():
            hours[user_id] = prior_week_hours(entries, day)
        return hours
