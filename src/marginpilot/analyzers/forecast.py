"""
Run-Rate Forecaster — project month-to-date figures to month end.

Each of revenue, COGS, operating expenses and payroll is extrapolated
independently with a straight-line daily run-rate:

  projected = month_to_date / days_elapsed × days_in_month

If projected costs exceed projected revenue the month is flagged as a loss and
the largest projected cost lines are returned as drivers.

Known limitation: this is a naive linear extrapolation. There is no
seasonality or day-of-week adjustment, so a month with a heavy weekend
front-loaded will over-project (and vice versa).
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Protocol

logger = logging.getLogger("marginpilot.analyzers.forecast")


class MonthToDateFigures(Protocol):
    """Anything exposing month-to-date revenue and cost totals."""

    revenue: float

    @property
    def cogs(self) -> float: ...

    @property
    def operating_expenses(self) -> float: ...

    payroll: float


@dataclass
class CostDriver:
    """A projected cost line, used to explain a forecast loss."""

    label: str
    amount: float


@dataclass
class ForecastResult:
    """Month-end projection from month-to-date figures."""

    projected_revenue: float = 0.0
    projected_cogs: float = 0.0
    projected_operating_expenses: float = 0.0
    projected_payroll: float = 0.0
    projected_net_profit: float = 0.0
    is_loss: bool = False
    days_elapsed: int = 1
    days_in_month: int = 30
    drivers: list[CostDriver] = field(default_factory=list)
    summary: str = ""

    @property
    def projected_total_costs(self) -> float:
        return self.projected_cogs + self.projected_operating_expenses + self.projected_payroll


class RunRateForecaster:
    """Straight-line month-end forecaster."""

    DEFAULT_MAX_DRIVERS = 3

    @classmethod
    def forecast(
        cls,
        figures: MonthToDateFigures,
        now: date | datetime,
        *,
        max_drivers: int = DEFAULT_MAX_DRIVERS,
    ) -> ForecastResult:
        """Project month-to-date figures to the end of ``now``'s month.

        Args:
            figures: Month-to-date revenue, cogs, operating_expenses and payroll.
            now: The as-of moment; its day-of-month is the elapsed day count.
            max_drivers: Maximum number of cost drivers returned.

        Returns:
            ForecastResult with projections, loss flag and ranked cost drivers.
        """
        days_elapsed = max(1, now.day)
        days_in_month = calendar.monthrange(now.year, now.month)[1]

        def project(value: float) -> float:
            return value / days_elapsed * days_in_month

        projected_revenue = project(figures.revenue)
        projected_cogs = project(figures.cogs)
        projected_opex = project(figures.operating_expenses)
        projected_payroll = project(figures.payroll)
        net = projected_revenue - projected_cogs - projected_opex - projected_payroll

        candidates = [
            CostDriver(label="COGS", amount=projected_cogs),
            CostDriver(label="Payroll", amount=projected_payroll),
            CostDriver(label="Operating Expenses", amount=projected_opex),
        ]
        drivers = sorted(
            (c for c in candidates if c.amount > 0),
            key=lambda c: c.amount,
            reverse=True,
        )[:max_drivers]

        result = ForecastResult(
            projected_revenue=projected_revenue,
            projected_cogs=projected_cogs,
            projected_operating_expenses=projected_opex,
            projected_payroll=projected_payroll,
            projected_net_profit=net,
            is_loss=net < 0,
            days_elapsed=days_elapsed,
            days_in_month=days_in_month,
            drivers=drivers,
        )
        result.summary = cls._build_summary(result)

        if result.is_loss:
            logger.warning(
                "Projected month-end loss of %.2f (day %d of %d)",
                net,
                days_elapsed,
                days_in_month,
            )
        else:
            logger.info("Projected month-end net profit %.2f", net)
        return result

    @staticmethod
    def _build_summary(result: ForecastResult) -> str:
        if not result.is_loss:
            return (
                f"On track: projected net profit ${result.projected_net_profit:,.2f} "
                f"on ${result.projected_revenue:,.2f} revenue "
                f"(day {result.days_elapsed} of {result.days_in_month})."
            )
        driver_text = ", ".join(f"{d.label} ${d.amount:,.2f}" for d in result.drivers)
        return (
            f"Projected net loss of ${abs(result.projected_net_profit):,.2f} this month "
            f"on ${result.projected_revenue:,.2f} projected revenue. "
            f"Largest costs: {driver_text}."
        )


def forecast(figures: MonthToDateFigures, now: date | datetime, **kwargs: int) -> ForecastResult:
    """Convenience function for :meth:`RunRateForecaster.forecast`."""
    return RunRateForecaster.forecast(figures, now, **kwargs)
