"""Tests for recurring-expense proration."""

from datetime import date, datetime

import pytest

from marginpilot.analyzers.proration import (
    days_between_inclusive,
    expense_amount_in_window,
    months_between_inclusive,
    overlap_range,
    total_recurring_in_window,
    within_window,
)
from marginpilot.models.records import Expense, ExpenseCadence


def _expense(amount: float, cadence: ExpenseCadence, start: date, end: date | None = None) -> Expense:
    return Expense(id="e1", name="Rent", amount=amount, cadence=cadence, start_date=start, end_date=end)


class TestCounting:
    def test_days_inclusive(self) -> None:
        assert days_between_inclusive(date(2025, 6, 1), date(2025, 6, 1)) == 1
        assert days_between_inclusive(date(2025, 6, 1), date(2025, 6, 30)) == 30

    def test_days_ignore_time_of_day(self) -> None:
        start = datetime(2025, 6, 1, 23, 0)
        end = datetime(2025, 6, 2, 1, 0)
        assert days_between_inclusive(start, end) == 2

    def test_months_inclusive(self) -> None:
        assert months_between_inclusive(date(2025, 6, 1), date(2025, 6, 30)) == 1
        assert months_between_inclusive(date(2025, 5, 20), date(2025, 6, 3)) == 2
        assert months_between_inclusive(date(2024, 12, 1), date(2025, 1, 31)) == 2

    def test_overlap_none(self) -> None:
        assert overlap_range(date(2025, 1, 1), date(2025, 1, 31), date(2025, 3, 1), date(2025, 3, 31)) is None

    def test_overlap_clipped(self) -> None:
        result = overlap_range(date(2025, 1, 15), date(2025, 4, 1), date(2025, 3, 1), date(2025, 3, 31))
        assert result == (date(2025, 3, 1), date(2025, 3, 31))


class TestExpenseAmountInWindow:
    def test_monthly_full_month_is_amount(self) -> None:
        expense = _expense(3000, ExpenseCadence.MONTHLY, date(2025, 1, 1))
        amount = expense_amount_in_window(expense, date(2025, 6, 1), date(2025, 6, 30))
        assert amount == pytest.approx(3000)

    def test_monthly_mid_window_start(self) -> None:
        expense = _expense(3000, ExpenseCadence.MONTHLY, date(2025, 5, 20))
        amount = expense_amount_in_window(expense, date(2025, 4, 1), date(2025, 6, 30))
        assert amount == pytest.approx(6000)

    def test_no_overlap_is_zero(self) -> None:
        expense = _expense(3000, ExpenseCadence.MONTHLY, date(2025, 1, 1), date(2025, 3, 31))
        assert expense_amount_in_window(expense, date(2025, 6, 1), date(2025, 6, 30)) == 0.0

    def test_starts_after_window_is_zero(self) -> None:
        expense = _expense(3000, ExpenseCadence.MONTHLY, date(2025, 7, 1))
        assert expense_amount_in_window(expense, date(2025, 6, 1), date(2025, 6, 30)) == 0.0

    def test_daily(self) -> None:
        expense = _expense(10, ExpenseCadence.DAILY, date(2025, 1, 1))
        assert expense_amount_in_window(expense, date(2025, 6, 1), date(2025, 6, 10)) == pytest.approx(100)

    def test_weekly(self) -> None:
        expense = _expense(70, ExpenseCadence.WEEKLY, date(2025, 1, 1))
        assert expense_amount_in_window(expense, date(2025, 6, 1), date(2025, 6, 14)) == pytest.approx(140)

    def test_annual(self) -> None:
        expense = _expense(12000, ExpenseCadence.ANNUAL, date(2024, 1, 1))
        assert expense_amount_in_window(expense, date(2025, 1, 1), date(2025, 6, 30)) == pytest.approx(6000)

    def test_end_date_clips(self) -> None:
        expense = _expense(10, ExpenseCadence.DAILY, date(2025, 1, 1), date(2025, 6, 5))
        assert expense_amount_in_window(expense, date(2025, 6, 1), date(2025, 6, 30)) == pytest.approx(50)

    def test_datetime_window_bounds(self) -> None:
        expense = _expense(10, ExpenseCadence.DAILY, date(2025, 1, 1))
        amount = expense_amount_in_window(expense, datetime(2025, 6, 1, 0, 0), datetime(2025, 6, 3, 21, 30))
        assert amount == pytest.approx(30)

    def test_total_recurring(self) -> None:
        expenses = [
            _expense(3000, ExpenseCadence.MONTHLY, date(2025, 1, 1)),
            _expense(10, ExpenseCadence.DAILY, date(2025, 1, 1)),
        ]
        total = total_recurring_in_window(expenses, date(2025, 6, 1), date(2025, 6, 30))
        assert total == pytest.approx(3300)

    def test_total_recurring_empty(self) -> None:
        assert total_recurring_in_window([], date(2025, 6, 1), date(2025, 6, 30)) == 0


class TestWithinWindow:
    def test_inclusive_dates(self) -> None:
        assert within_window(date(2025, 6, 1), date(2025, 6, 1), date(2025, 6, 30))
        assert within_window(date(2025, 6, 30), date(2025, 6, 1), date(2025, 6, 30))
        assert not within_window(date(2025, 7, 1), date(2025, 6, 1), date(2025, 6, 30))

    def test_date_bound_covers_whole_day(self) -> None:
        assert within_window(datetime(2025, 6, 30, 23, 59), date(2025, 6, 1), date(2025, 6, 30))

    def test_datetime_bounds_are_exact(self) -> None:
        end = datetime(2025, 6, 10, 12, 0)
        assert within_window(datetime(2025, 6, 10, 12, 0), None, end)
        assert not within_window(datetime(2025, 6, 10, 12, 1), None, end)

    def test_open_bounds(self) -> None:
        assert within_window(datetime(1999, 1, 1), None, None)
