"""
Proration Calculator — attribute recurring costs to an arbitrary reporting window.

A recurring expense (rent, utilities, software...) is stored as an amount, a
cadence and an active date range. For any report window we need the share of
that cost which falls inside the window:

  DAILY    amount × days
  WEEKLY   amount × days / 7
  MONTHLY  amount × months
  ANNUAL   amount × months / 12

Days and months are counted inclusively on calendar dates, so time-of-day
noise on the window bounds never drops a partial final day.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime

from marginpilot.models.records import Expense, ExpenseCadence

logger = logging.getLogger("marginpilot.analyzers.proration")


def as_date(value: date | datetime) -> date:
    """Collapse a datetime to its calendar date (dates pass through)."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between_inclusive(start: date | datetime, end: date | datetime) -> int:
    """Number of calendar days from start to end, counting both ends."""
    return (as_date(end) - as_date(start)).days + 1


def months_between_inclusive(start: date | datetime, end: date | datetime) -> int:
    """Number of calendar months touched from start to end, counting both ends."""
    return (end.year - start.year) * 12 + (end.month - start.month) + 1


def overlap_range(
    start: date | datetime,
    end: date | datetime,
    range_start: date | datetime,
    range_end: date | datetime,
) -> tuple[date, date] | None:
    """Intersect [start, end] with [range_start, range_end] on calendar dates."""
    effective_start = max(as_date(start), as_date(range_start))
    effective_end = min(as_date(end), as_date(range_end))
    if effective_end < effective_start:
        return None
    return effective_start, effective_end


def expense_amount_in_window(
    expense: Expense,
    window_start: date | datetime,
    window_end: date | datetime,
) -> float:
    """Portion of a recurring expense attributable to the window.

    An expense without an end date is treated as running through the end of
    the window. Expenses that do not overlap the window contribute 0.
    """
    end = expense.end_date or window_end
    overlap = overlap_range(expense.start_date, end, window_start, window_end)
    if overlap is None:
        return 0.0

    day_count = days_between_inclusive(*overlap)
    month_count = months_between_inclusive(*overlap)

    if expense.cadence == ExpenseCadence.DAILY:
        return expense.amount * day_count
    if expense.cadence == ExpenseCadence.WEEKLY:
        return expense.amount * day_count / 7
    if expense.cadence == ExpenseCadence.MONTHLY:
        return expense.amount * month_count
    if expense.cadence == ExpenseCadence.ANNUAL:
        return expense.amount * month_count / 12

    logger.warning("Unknown cadence %r on expense %s", expense.cadence, expense.id)
    return 0.0


def total_recurring_in_window(
    expenses: Iterable[Expense],
    window_start: date | datetime,
    window_end: date | datetime,
) -> float:
    """Sum of every recurring expense prorated to the window."""
    return sum(expense_amount_in_window(e, window_start, window_end) for e in expenses)


def within_window(
    moment: date | datetime,
    window_start: date | datetime | None,
    window_end: date | datetime | None,
) -> bool:
    """Inclusive window test. Date-only bounds cover their whole day."""
    if window_start is not None:
        if isinstance(window_start, datetime) and isinstance(moment, datetime):
            if moment < window_start:
                return False
        elif as_date(moment) < as_date(window_start):
            return False
    if window_end is not None:
        if isinstance(window_end, datetime) and isinstance(moment, datetime):
            if moment > window_end:
                return False
        elif as_date(moment) > as_date(window_end):
            return False
    return True
