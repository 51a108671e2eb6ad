"""
Profit & Loss Calculator — period figures and a daily P&L series.

Combines every cost source for a window:

- **COGS** = snapshot line-item cost of completed sales
  + meal-prep ingredient usage (valued at current ingredient cost).
- **Operating expenses** = recurring expenses prorated to the window
  + one-off expense transactions + waste records.
- **Payroll** = paid payroll whose pay period falls in the window.

One-off transactions that mirror a waste record (their notes contain
"Waste record:") are skipped so waste is not counted twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from marginpilot.analyzers.proration import (
    as_date,
    days_between_inclusive,
    expense_amount_in_window,
    within_window,
)
from marginpilot.analyzers.rollup import margin_percent
from marginpilot.models.records import ExpenseTransaction, PayrollStatus, ReportDataset

logger = logging.getLogger("marginpilot.analyzers.profit_loss")

WASTE_MIRROR_MARKER = "Waste record:"
COGS_MARKERS = ("COGS", "Manual stock adjustment")
DELIVERY_CATEGORY = "INVENTORY_PURCHASE"


def is_waste_mirror(tx: ExpenseTransaction) -> bool:
    return bool(tx.notes) and WASTE_MIRROR_MARKER in tx.notes


def transaction_category(tx: ExpenseTransaction) -> str:
    """Display category for a one-off transaction."""
    if tx.notes and any(marker in tx.notes for marker in COGS_MARKERS):
        return "COGS"
    if tx.category == DELIVERY_CATEGORY:
        return "COGS (Deliveries)"
    if tx.category == "OTHER":
        return "Other"
    return tx.category


@dataclass
class PeriodFigures:
    """Revenue and every cost line for a window."""

    revenue: float = 0.0
    cogs_from_sales: float = 0.0
    cogs_from_meal_prep: float = 0.0
    recurring_expenses: float = 0.0
    one_off_expenses: float = 0.0
    waste: float = 0.0
    payroll: float = 0.0
    order_count: int = 0
    revenue_with_costing: float = 0.0
    expense_by_category: dict[str, float] = field(default_factory=dict)

    @property
    def cogs(self) -> float:
        return self.cogs_from_sales + self.cogs_from_meal_prep

    @property
    def operating_expenses(self) -> float:
        return self.recurring_expenses + self.one_off_expenses + self.waste

    @property
    def gross_profit(self) -> float:
        return self.revenue - self.cogs

    @property
    def net_profit(self) -> float:
        return self.revenue - self.cogs - self.operating_expenses - self.payroll

    @property
    def net_margin(self) -> float:
        return margin_percent(self.net_profit, self.revenue)

    @property
    def food_cost_percent(self) -> float:
        return (self.cogs / self.revenue * 100) if self.revenue > 0 else 0.0

    @property
    def cogs_coverage_percent(self) -> int:
        """Share of revenue whose line items carry a cost snapshot."""
        if self.revenue <= 0:
            return 100
        return round(self.revenue_with_costing / self.revenue * 100)


@dataclass
class DailyProfitLoss:
    """One day of the P&L series."""

    date: date
    revenue: float = 0.0
    cogs: float = 0.0
    expenses: float = 0.0
    payroll: float = 0.0

    @property
    def net_profit(self) -> float:
        return self.revenue - self.cogs - self.expenses - self.payroll

    @property
    def margin(self) -> float:
        return margin_percent(self.net_profit, self.revenue)


class ProfitLossCalculator:
    """Compute period P&L figures from a report dataset."""

    @classmethod
    def period_figures(
        cls,
        dataset: ReportDataset,
        window_start: date | datetime,
        window_end: date | datetime,
    ) -> PeriodFigures:
        """Revenue, COGS, expenses and payroll for the window.

        Args:
            dataset: Records for one tenant.
            window_start: Start of the window (inclusive).
            window_end: End of the window (inclusive).

        Returns:
            PeriodFigures; every figure is 0 when there is no data.
        """
        figures = PeriodFigures()
        by_category: dict[str, float] = {}

        for sale in dataset.sales:
            if not sale.is_completed or not within_window(sale.timestamp, window_start, window_end):
                continue
            figures.order_count += 1
            for line in sale.items:
                figures.revenue += line.revenue
                figures.cogs_from_sales += line.total_cost
                if line.is_costed:
                    figures.revenue_with_costing += line.revenue

        for session in dataset.meal_prep_sessions:
            if within_window(session.prep_date, window_start, window_end):
                figures.cogs_from_meal_prep += session.total_cost

        for expense in dataset.expenses:
            amount = expense_amount_in_window(expense, window_start, window_end)
            figures.recurring_expenses += amount
            if amount:
                by_category[expense.category] = by_category.get(expense.category, 0.0) + amount

        skipped_mirrors = 0
        for tx in dataset.expense_transactions:
            if not within_window(tx.date, window_start, window_end):
                continue
            if is_waste_mirror(tx):
                skipped_mirrors += 1
                continue
            figures.one_off_expenses += tx.amount
            category = transaction_category(tx)
            by_category[category] = by_category.get(category, 0.0) + tx.amount

        figures.waste = sum(
            w.cost for w in dataset.waste_records if within_window(w.date, window_start, window_end)
        )
        if figures.waste > 0:
            by_category["Waste"] = by_category.get("Waste", 0.0) + figures.waste

        figures.payroll = sum(
            p.total_paid
            for p in dataset.payrolls
            if p.status == PayrollStatus.PAID and within_window(p.period, window_start, window_end)
        )
        figures.expense_by_category = by_category

        if skipped_mirrors:
            logger.debug("Skipped %d expense transactions mirrored from waste records", skipped_mirrors)
        logger.info(
            "P&L figures: revenue=%.2f cogs=%.2f opex=%.2f payroll=%.2f",
            figures.revenue,
            figures.cogs,
            figures.operating_expenses,
            figures.payroll,
        )
        return figures

    @classmethod
    def daily_series(
        cls,
        dataset: ReportDataset,
        window_start: date | datetime,
        window_end: date | datetime,
    ) -> list[DailyProfitLoss]:
        """Dense per-day P&L across the window.

        Revenue, COGS, one-off expenses and waste land on their own day;
        recurring expenses and payroll are spread evenly across the window.
        """
        first, last = as_date(window_start), as_date(window_end)
        if last < first:
            return []

        period_days = days_between_inclusive(first, last)
        days = {
            first + timedelta(days=offset): DailyProfitLoss(date=first + timedelta(days=offset))
            for offset in range(period_days)
        }

        recurring = sum(expense_amount_in_window(e, window_start, window_end) for e in dataset.expenses)
        payroll = sum(
            p.total_paid
            for p in dataset.payrolls
            if p.status == PayrollStatus.PAID and within_window(p.period, window_start, window_end)
        )
        for day in days.values():
            day.expenses = recurring / period_days
            day.payroll = payroll / period_days

        for sale in dataset.sales:
            if not sale.is_completed or not within_window(sale.timestamp, window_start, window_end):
                continue
            day = days.get(sale.timestamp.date())
            if day is not None:
                day.revenue += sale.revenue
                day.cogs += sale.cost

        for session in dataset.meal_prep_sessions:
            day = days.get(session.prep_date)
            if day is not None:
                day.cogs += session.total_cost

        for tx in dataset.expense_transactions:
            if is_waste_mirror(tx):
                continue
            day = days.get(tx.date)
            if day is not None:
                day.expenses += tx.amount

        for waste in dataset.waste_records:
            day = days.get(waste.date)
            if day is not None:
                day.expenses += waste.cost

        return [days[d] for d in sorted(days)]
