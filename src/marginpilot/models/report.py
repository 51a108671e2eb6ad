"""
Report models — the output contracts handed to the presentation layer.

Analyzers work on plain dataclasses; the engine converts their results into
these pydantic models so they serialize cleanly to JSON or Markdown.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from marginpilot.analyzers.quadrant import Quadrant


class DaySeriesPoint(BaseModel):
    date: date
    revenue: float = 0.0
    cost: float = 0.0


class CategoryTotal(BaseModel):
    name: str
    revenue: float = 0.0


class ItemPerformance(BaseModel):
    """Per-item stats as shown in top/bottom tables."""

    id: str
    name: str
    quantity: int = 0
    revenue: float = 0.0
    profit: float = 0.0
    margin: float = 0.0
    top_time_of_day: str = ""
    commonly_with: str | None = None


class ComboSummary(BaseModel):
    items: list[str] = Field(default_factory=list, description="Display names of the two items")
    count: int = 0
    margin: float = 0.0
    top_time_of_day: str = ""


class QuadrantEntry(BaseModel):
    menu_item_id: str
    name: str
    category: str
    quadrant: Quadrant
    margin_percent: float
    units_sold: int


class QuadrantSummary(BaseModel):
    counts: dict[Quadrant, int] = Field(default_factory=lambda: {q: 0 for q in Quadrant})
    items: list[QuadrantEntry] = Field(default_factory=list)


class CostDriverSummary(BaseModel):
    label: str
    amount: float


class ForecastSummary(BaseModel):
    projected_net_profit: float = 0.0
    is_loss: bool = False
    projected_revenue: float = 0.0
    days_elapsed: int = 1
    days_in_month: int = 30
    drivers: list[CostDriverSummary] = Field(default_factory=list)
    summary: str = ""


class ProfitLossSummary(BaseModel):
    """Period P&L statement."""

    revenue: float = 0.0
    cogs: float = 0.0
    cogs_from_sales: float = 0.0
    cogs_from_meal_prep: float = 0.0
    gross_profit: float = 0.0
    operating_expenses: float = 0.0
    payroll: float = 0.0
    net_profit: float = 0.0
    net_margin: float = 0.0
    food_cost_percent: float = 0.0
    cogs_coverage_percent: int = 100
    expense_by_category: dict[str, float] = Field(default_factory=dict)


class DailyProfitLossPoint(BaseModel):
    date: date
    revenue: float = 0.0
    net_profit: float = 0.0
    margin: float = 0.0


class BusiestHourSummary(BaseModel):
    hour: int
    orders: int
    revenue: float


class TrendPoint(BaseModel):
    date: date
    revenue: float = 0.0
    orders: int = 0


class _ExportMixin(BaseModel):
    def to_json(self) -> str:
        """Export report as JSON."""
        return self.model_dump_json(indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Export report as dictionary."""
        return self.model_dump()


class AnalyticsReport(_ExportMixin):
    """Full analytics report for a trailing window."""

    generated_at: datetime = Field(default_factory=datetime.now)
    period_start: date
    period_end: date
    currency: str = "USD"

    total_revenue: float = 0.0
    total_cost: float = 0.0
    total_profit: float = 0.0
    margin: float = 0.0
    order_count: int = 0
    average_check: float = 0.0

    day_series: list[DaySeriesPoint] = Field(default_factory=list)
    category_totals: list[CategoryTotal] = Field(default_factory=list)
    top_items_by_revenue: list[ItemPerformance] = Field(default_factory=list)
    top_items_by_profit: list[ItemPerformance] = Field(default_factory=list)
    top_selling_items: list[ItemPerformance] = Field(default_factory=list)
    worst_selling_items: list[ItemPerformance] = Field(default_factory=list)
    highest_margin_items: list[ItemPerformance] = Field(default_factory=list)
    lowest_margin_items: list[ItemPerformance] = Field(default_factory=list)
    top_combos: list[ComboSummary] = Field(default_factory=list)
    quadrants: QuadrantSummary = Field(default_factory=QuadrantSummary)
    profit_loss: ProfitLossSummary = Field(default_factory=ProfitLossSummary)
    daily_profit_loss: list[DailyProfitLossPoint] = Field(default_factory=list)

    def to_markdown(self) -> str:
        """Export report as Markdown."""
        from marginpilot.exporters.markdown import render_analytics_markdown

        return render_analytics_markdown(self)


class TodaySummary(BaseModel):
    revenue: float = 0.0
    orders: int = 0
    margin: float = 0.0
    growth: float = 0.0


class WeekSummary(BaseModel):
    revenue: float = 0.0
    orders: int = 0
    trend: list[TrendPoint] = Field(default_factory=list)


class DashboardSummary(_ExportMixin):
    """Owner dashboard: today, this week, month to date and the month-end outlook."""

    generated_at: datetime = Field(default_factory=datetime.now)
    as_of: datetime
    currency: str = "USD"

    today: TodaySummary = Field(default_factory=TodaySummary)
    week: WeekSummary = Field(default_factory=WeekSummary)
    month: ProfitLossSummary = Field(default_factory=ProfitLossSummary)
    month_orders: int = 0

    top_selling_items: list[ItemPerformance] = Field(default_factory=list)
    worst_selling_items: list[ItemPerformance] = Field(default_factory=list)
    highest_margin_items: list[ItemPerformance] = Field(default_factory=list)
    lowest_margin_items: list[ItemPerformance] = Field(default_factory=list)
    top_combos: list[ComboSummary] = Field(default_factory=list)
    quadrant_counts: dict[Quadrant, int] = Field(default_factory=lambda: {q: 0 for q in Quadrant})
    busiest_hour: BusiestHourSummary | None = None
    forecast: ForecastSummary = Field(default_factory=ForecastSummary)

    def to_markdown(self) -> str:
        """Export summary as Markdown."""
        from marginpilot.exporters.markdown import render_dashboard_markdown

        return render_dashboard_markdown(self)
