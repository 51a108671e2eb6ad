"""
MarginPilot — shared profitability engine.

The ProfitabilityEngine is the single entry point behind both reporting
surfaces. The dashboard summary and the full analytics report run the same
analysis routine and differ only in which views they render.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any

from marginpilot.analyzers.co_purchase import CoPurchaseMiner, CoPurchaseResult
from marginpilot.analyzers.forecast import ForecastResult, RunRateForecaster
from marginpilot.analyzers.profit_loss import PeriodFigures, ProfitLossCalculator
from marginpilot.analyzers.proration import within_window
from marginpilot.analyzers.quadrant import QuadrantClassifier, QuadrantResult
from marginpilot.analyzers.rollup import ItemStats, RollupAggregator, RollupResult
from marginpilot.analyzers.time_of_day import busiest_hour
from marginpilot.config import MarginPilotConfig
from marginpilot.models.records import ReportDataset
from marginpilot.models.report import (
    AnalyticsReport,
    BusiestHourSummary,
    CategoryTotal,
    ComboSummary,
    CostDriverSummary,
    DailyProfitLossPoint,
    DashboardSummary,
    DaySeriesPoint,
    ForecastSummary,
    ItemPerformance,
    ProfitLossSummary,
    QuadrantEntry,
    QuadrantSummary,
    TodaySummary,
    TrendPoint,
    WeekSummary,
)

logger = logging.getLogger("marginpilot")


@dataclass
class WindowAnalysis:
    """Rollup, combos and quadrants for one window."""

    rollup: RollupResult
    combos: CoPurchaseResult
    quadrants: QuadrantResult


@dataclass
class ProfitabilityEngine:
    """Stateless engine turning historical records into finished reports.

    Usage::

        from marginpilot import ProfitabilityEngine

        engine = ProfitabilityEngine.from_config("marginpilot.yaml")
        report = engine.analytics_report(dataset)
        summary = engine.dashboard_summary(dataset, now=datetime.now())

    Nothing is cached between calls; every report uses only the records
    passed in for that call.
    """

    config: MarginPilotConfig = field(default_factory=MarginPilotConfig)

    @classmethod
    def from_config(cls, config_path: str | None = None, **overrides: Any) -> ProfitabilityEngine:
        """Create an engine from a config file or keyword arguments."""
        return cls(config=MarginPilotConfig.load(config_path, **overrides))

    def analyze_window(
        self,
        dataset: ReportDataset,
        window_start: date | datetime,
        window_end: date | datetime,
    ) -> WindowAnalysis:
        """Run rollup, co-purchase mining and quadrant classification."""
        day_parts = self.config.day_parts.to_scheme()
        sales = [s for s in dataset.sales if s.is_completed]

        rollup = RollupAggregator.aggregate(
            sales,
            dataset.catalog,
            window_start=window_start,
            window_end=window_end,
            day_parts=day_parts,
        )
        in_window = [s for s in sales if within_window(s.timestamp, window_start, window_end)]
        combos = CoPurchaseMiner.mine(
            in_window,
            dataset.catalog,
            limit=self.config.analytics.combo_limit,
            day_parts=day_parts,
        )
        for item_id, stats in rollup.items.items():
            stats.commonly_with = combos.commonly_with(item_id)
        quadrants = QuadrantClassifier.classify(rollup.items.values())
        return WindowAnalysis(rollup=rollup, combos=combos, quadrants=quadrants)

    def analytics_report(
        self,
        dataset: ReportDataset,
        window_start: date | datetime | None = None,
        window_end: date | datetime | None = None,
    ) -> AnalyticsReport:
        """Full analytics report for a window (default: trailing ``trailing_days``).

        Args:
            dataset: Records for one tenant.
            window_start: Window start (inclusive). Defaults to midnight
                ``trailing_days - 1`` days before ``window_end``.
            window_end: Window end (inclusive). Defaults to now.

        Returns:
            AnalyticsReport ready for JSON/Markdown export.
        """
        end = window_end or datetime.now()
        start = window_start or datetime.combine(
            _to_date(end) - timedelta(days=self.config.analytics.trailing_days - 1), time.min
        )
        logger.info("Building analytics report %s to %s from %s", start, end, dataset.source)

        analysis = self.analyze_window(dataset, start, end)
        rollup = analysis.rollup
        top_n = self.config.analytics.top_n
        figures = ProfitLossCalculator.period_figures(dataset, start, end)
        daily = ProfitLossCalculator.daily_series(dataset, start, end)

        return AnalyticsReport(
            period_start=_to_date(start),
            period_end=_to_date(end),
            currency=self.config.currency,
            total_revenue=rollup.total_revenue,
            total_cost=rollup.total_cost,
            total_profit=rollup.total_profit,
            margin=rollup.margin,
            order_count=rollup.order_count,
            average_check=rollup.average_check,
            day_series=[DaySeriesPoint(date=d.date, revenue=d.revenue, cost=d.cost) for d in rollup.day_series],
            category_totals=[
                CategoryTotal(name=g.label, revenue=g.revenue)
                for g in rollup.top_categories(self.config.analytics.category_limit)
            ],
            top_items_by_revenue=self._items(rollup.top_by_revenue(top_n), rollup),
            top_items_by_profit=self._items(rollup.top_by_profit(top_n), rollup),
            top_selling_items=self._items(rollup.top_by_quantity(top_n), rollup),
            worst_selling_items=self._items(rollup.bottom_by_quantity(top_n), rollup),
            highest_margin_items=self._items(rollup.highest_margin(top_n), rollup),
            lowest_margin_items=self._items(rollup.lowest_margin(top_n), rollup),
            top_combos=self._combos(analysis.combos),
            quadrants=self._quadrants(analysis.quadrants),
            profit_loss=self._profit_loss(figures),
            daily_profit_loss=[
                DailyProfitLossPoint(date=d.date, revenue=d.revenue, net_profit=d.net_profit, margin=d.margin)
                for d in daily
            ],
        )

    def dashboard_summary(self, dataset: ReportDataset, now: datetime | None = None) -> DashboardSummary:
        """Owner dashboard as of ``now``: today, week, month to date and forecast."""
        now = now or datetime.now()
        today_start = datetime.combine(now.date(), time.min)
        yesterday_start = today_start - timedelta(days=1)
        week_start = today_start - timedelta(days=6)
        month_start = today_start.replace(day=1)
        logger.info("Building dashboard summary as of %s from %s", now, dataset.source)

        month = self.analyze_window(dataset, month_start, now)
        figures = ProfitLossCalculator.period_figures(dataset, month_start, now)
        outlook = RunRateForecaster.forecast(figures, now, max_drivers=self.config.forecast.max_drivers)

        today = RollupAggregator.aggregate(dataset.sales, window_start=today_start, window_end=now)
        yesterday = RollupAggregator.aggregate(
            dataset.sales,
            window_start=yesterday_start,
            window_end=today_start - timedelta(microseconds=1),
        )
        week = RollupAggregator.aggregate(dataset.sales, window_start=week_start, window_end=now)
        growth = (
            (today.total_revenue - yesterday.total_revenue) / yesterday.total_revenue * 100
            if yesterday.total_revenue > 0
            else 0.0
        )
        peak = busiest_hour(s for s in dataset.sales if week_start <= s.timestamp <= now)

        top_n = self.config.analytics.top_n
        rollup = month.rollup
        return DashboardSummary(
            as_of=now,
            currency=self.config.currency,
            today=TodaySummary(
                revenue=today.total_revenue,
                orders=today.order_count,
                margin=today.margin,
                growth=growth,
            ),
            week=WeekSummary(
                revenue=week.total_revenue,
                orders=week.order_count,
                trend=[TrendPoint(date=d.date, revenue=d.revenue, orders=d.orders) for d in week.day_series],
            ),
            month=self._profit_loss(figures),
            month_orders=figures.order_count,
            top_selling_items=self._items(rollup.top_by_quantity(top_n), rollup),
            worst_selling_items=self._items(rollup.bottom_by_quantity(top_n), rollup),
            highest_margin_items=self._items(rollup.highest_margin(top_n), rollup),
            lowest_margin_items=self._items(rollup.lowest_margin(top_n), rollup),
            top_combos=self._combos(month.combos),
            quadrant_counts=dict(month.quadrants.counts),
            busiest_hour=BusiestHourSummary(hour=peak.hour, orders=peak.orders, revenue=peak.revenue) if peak else None,
            forecast=self._forecast(outlook),
        )

    # ------------------------------------------------------------------
    # Conversions to report models

    @staticmethod
    def _items(stats: Iterable[ItemStats], rollup: RollupResult) -> list[ItemPerformance]:
        return [
            ItemPerformance(
                id=s.menu_item_id,
                name=s.name,
                quantity=s.quantity,
                revenue=s.revenue,
                profit=s.profit,
                margin=s.margin,
                top_time_of_day=s.top_time_of_day(rollup.day_parts),
                commonly_with=s.commonly_with,
            )
            for s in stats
        ]

    @staticmethod
    def _combos(result: CoPurchaseResult) -> list[ComboSummary]:
        return [
            ComboSummary(
                items=list(c.names),
                count=c.count,
                margin=c.margin,
                top_time_of_day=c.top_time_of_day,
            )
            for c in result.combos
        ]

    @staticmethod
    def _quadrants(result: QuadrantResult) -> QuadrantSummary:
        return QuadrantSummary(
            counts=dict(result.counts),
            items=[
                QuadrantEntry(
                    menu_item_id=i.menu_item_id,
                    name=i.name,
                    category=i.category,
                    quadrant=i.quadrant,
                    margin_percent=i.margin_percent,
                    units_sold=i.units_sold,
                )
                for i in result.items
            ],
        )

    @staticmethod
    def _profit_loss(figures: PeriodFigures) -> ProfitLossSummary:
        return ProfitLossSummary(
            revenue=figures.revenue,
            cogs=figures.cogs,
            cogs_from_sales=figures.cogs_from_sales,
            cogs_from_meal_prep=figures.cogs_from_meal_prep,
            gross_profit=figures.gross_profit,
            operating_expenses=figures.operating_expenses,
            payroll=figures.payroll,
            net_profit=figures.net_profit,
            net_margin=figures.net_margin,
            food_cost_percent=figures.food_cost_percent,
            cogs_coverage_percent=figures.cogs_coverage_percent,
            expense_by_category=dict(figures.expense_by_category),
        )

    @staticmethod
    def _forecast(result: ForecastResult) -> ForecastSummary:
        return ForecastSummary(
            projected_net_profit=result.projected_net_profit,
            is_loss=result.is_loss,
            projected_revenue=result.projected_revenue,
            days_elapsed=result.days_elapsed,
            days_in_month=result.days_in_month,
            drivers=[CostDriverSummary(label=d.label, amount=d.amount) for d in result.drivers],
            summary=result.summary,
        )


def _to_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value

