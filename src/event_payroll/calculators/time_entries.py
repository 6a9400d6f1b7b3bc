"""Time entry aggregation: clock events to worked hours and meal spans."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from event_payroll.calculators.types import (
    ZERO,
    ClockAction,
    TimeSpan,
    WorkedTime,
)

logger = logging.getLogger(__name__)

# Number of meal spans reported for display
MAX_MEAL_SPANS = 2


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes and ISO-8601 strings (including a trailing ``Z``).
    Naive values are taken to be UTC. Returns None for anything unreadable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_action(value: Any) -> ClockAction | None:
    """Map a stored action string to ClockAction, or None if unknown."""
    if isinstance(value, ClockAction):
        return value
    try:
        return ClockAction(str(value).strip().lower())
    except ValueError:
        return None


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, dict):
        return entry.get(name)
    return getattr(entry, name, None)


def order_entries(entries: Iterable[Any]) -> list[tuple[datetime, ClockAction]]:
    """Parse and sort entries by timestamp, dropping unreadable rows.

    Entries may be ORM rows, ClockEntry values or plain dicts with
    ``action`` and ``timestamp`` keys. The sort is stable, so entries sharing a
    timestamp keep their stored order.
    """
    ordered: list[tuple[datetime, ClockAction]] = []
    dropped = 0
    for entry in entries:
        timestamp = parse_timestamp(_field(entry, "timestamp"))
        action = parse_action(_field(entry, "action"))
        if timestamp is None or action is None:
            dropped += 1
            continue
        ordered.append((timestamp, action))

    if dropped:
        logger.debug("Dropped %d unreadable time entries", dropped)

    ordered.sort(key=lambda item: item[0])
    return ordered


def pair_spans(
    ordered: Iterable[tuple[datetime, ClockAction]],
    open_action: ClockAction,
    close_action: ClockAction,
) -> list[TimeSpan]:
    """Pair opening and closing actions into closed spans.

    The first opening action wins; repeats before a close are ignored. A close
    with nothing open is ignored. A close at or before its open still closes
    the span but contributes nothing.
    """
    spans: list[TimeSpan] = []
    opened: datetime | None = None
    for timestamp, action in ordered:
        if action is open_action:
            if opened is None:
                opened = timestamp
        elif action is close_action and opened is not None:
            if timestamp > opened:
                spans.append(TimeSpan(opened, timestamp))
            opened = None
    return spans


def sum_hours(spans: Iterable[TimeSpan]) -> Decimal:
    """Total hours across spans."""
    return sum((span.hours for span in spans), ZERO)


def clocked_hours(entries: Iterable[Any]) -> Decimal:
    """Hours worked in clock_in/clock_out pairs, ignoring meal markers."""
    ordered = order_entries(entries)
    return sum_hours(pair_spans(ordered, ClockAction.CLOCK_IN, ClockAction.CLOCK_OUT))


def _explicit_meal_spans(ordered: list[tuple[datetime, ClockAction]]) -> list[TimeSpan]:
    starts = [ts for ts, action in ordered if action is ClockAction.MEAL_START]
    ends = [ts for ts, action in ordered if action is ClockAction.MEAL_END]
    spans = []
    for start, end in list(zip(starts, ends))[:MAX_MEAL_SPANS]:
        if end > start:
            spans.append(TimeSpan(start, end))
    return spans


def _gap_meal_spans(intervals: list[TimeSpan]) -> list[TimeSpan]:
    gaps: list[TimeSpan] = []
    for current, following in zip(intervals, intervals[1:]):
        if following.start > current.end:
            gaps.append(TimeSpan(current.end, following.start))
        if len(gaps) >= MAX_MEAL_SPANS:
            break
    return gaps


def aggregate_time_entries(entries: Iterable[Any]) -> WorkedTime:
    """Aggregate one worker's time entries at one event.

    ``actual_hours`` is the sum of closed clock_in/clock_out intervals. Meal
    time falls between a clock_out and the next clock_in, so it is never part
    of a summed interval and is not subtracted again; explicit meal pairs are
    reported in ``meal_hours``.

    Without explicit meal markers, up to two gaps between work intervals are
    reported as inferred meal spans for display.
    """
    ordered = order_entries(entries)

    intervals = pair_spans(ordered, ClockAction.CLOCK_IN, ClockAction.CLOCK_OUT)
    meals = pair_spans(ordered, ClockAction.MEAL_START, ClockAction.MEAL_END)

    clock_ins = [ts for ts, action in ordered if action is ClockAction.CLOCK_IN]
    clock_outs = [ts for ts, action in ordered if action is ClockAction.CLOCK_OUT]

    has_meal_markers = any(
        action in (ClockAction.MEAL_START, ClockAction.MEAL_END) for _, action in ordered
    )
    if has_meal_markers:
        meal_spans = _explicit_meal_spans(ordered)
        inferred = False
    else:
        meal_spans = _gap_meal_spans(intervals)
        inferred = bool(meal_spans)

    return WorkedTime(
        actual_hours=sum_hours(intervals),
        meal_hours=sum_hours(meals),
        first_clock_in=clock_ins[0] if clock_ins else None,
        last_clock_out=clock_outs[-1] if clock_outs else None,
        work_intervals=intervals,
        meal_spans=meal_spans,
        meals_inferred=inferred,
    )
