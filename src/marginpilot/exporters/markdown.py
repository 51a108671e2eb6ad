"""
Markdown report exporter.

Renders an AnalyticsReport or DashboardSummary as Markdown, suitable for
GitHub, Notion, or any Markdown viewer.
"""

from __future__ import annotations

from marginpilot.analyzers.quadrant import RECOMMENDATIONS, Quadrant
from marginpilot.models.report import (
    AnalyticsReport,
    ComboSummary,
    DashboardSummary,
    ForecastSummary,
    ItemPerformance,
    ProfitLossSummary,
)

_QUADRANT_EMOJI = {
    Quadrant.STAR: "⭐",
    Quadrant.PUZZLE: "🧩",
    Quadrant.WORKHORSE: "🐴",
    Quadrant.DOG: "🐶",
}


def _money(value: float, currency: str) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}{abs(value):,.2f} {currency}"


def _item_table(title: str, items: list[ItemPerformance], currency: str) -> list[str]:
    lines = [f"### {title}", ""]
    if not items:
        return lines + ["*No sales in this period.*", ""]
    lines.append("| # | Item | Qty | Revenue | Profit | Margin | Peak | Often with |")
    lines.append("|---|------|-----|---------|--------|--------|------|------------|")
    for i, item in enumerate(items, 1):
        lines.append(
            f"| {i} | {item.name} | {item.quantity} | {_money(item.revenue, currency)} | "
            f"{_money(item.profit, currency)} | {item.margin:.1f}% | {item.top_time_of_day} | "
            f"{item.commonly_with or '-'} |"
        )
    lines.append("")
    return lines


def _combo_table(combos: list[ComboSummary]) -> list[str]:
    lines = ["## 🍽️ Top Combos", ""]
    if not combos:
        return lines + ["*No multi-item orders in this period.*", ""]
    lines.append("| # | Combo | Orders | Margin | Peak |")
    lines.append("|---|-------|--------|--------|------|")
    for i, combo in enumerate(combos, 1):
        lines.append(f"| {i} | {' + '.join(combo.items)} | {combo.count} | {combo.margin:.1f}% | {combo.top_time_of_day} |")
    lines.append("")
    return lines


def _profit_loss_table(pl: ProfitLossSummary, currency: str) -> list[str]:
    lines = ["| Line | Amount |", "|------|--------|"]
    lines.append(f"| Revenue | {_money(pl.revenue, currency)} |")
    lines.append(f"| COGS (sales) | {_money(pl.cogs_from_sales, currency)} |")
    lines.append(f"| COGS (meal prep) | {_money(pl.cogs_from_meal_prep, currency)} |")
    lines.append(f"| **Gross Profit** | **{_money(pl.gross_profit, currency)}** |")
    lines.append(f"| Operating Expenses | {_money(pl.operating_expenses, currency)} |")
    lines.append(f"| Payroll | {_money(pl.payroll, currency)} |")
    lines.append(f"| **Net Profit** | **{_money(pl.net_profit, currency)}** |")
    lines.append(f"| Net Margin | {pl.net_margin:.1f}% |")
    lines.append(f"| Food Cost | {pl.food_cost_percent:.1f}% |")
    lines.append(f"| COGS Coverage | {pl.cogs_coverage_percent}% |")
    lines.append("")

    if pl.expense_by_category:
        lines.append("**Expenses by category:**")
        lines.append("")
        for name, amount in sorted(pl.expense_by_category.items(), key=lambda kv: kv[1], reverse=True):
            lines.append(f"- {name}: {_money(amount, currency)}")
        lines.append("")
    if pl.cogs_coverage_percent < 100:
        lines.append(
            f"> ⚠️ Only {pl.cogs_coverage_percent}% of revenue has a recorded cost; "
            "COGS and margins are understated."
        )
        lines.append("")
    return lines


def _forecast_section(forecast: ForecastSummary, currency: str) -> list[str]:
    emoji = "🔴" if forecast.is_loss else "🟢"
    lines = [f"## {emoji} Month-End Forecast", ""]
    lines.append(f"Day {forecast.days_elapsed} of {forecast.days_in_month}.")
    lines.append("")
    lines.append(f"- Projected revenue: {_money(forecast.projected_revenue, currency)}")
    lines.append(f"- Projected net profit: {_money(forecast.projected_net_profit, currency)}")
    lines.append("")
    if forecast.is_loss and forecast.drivers:
        lines.append("**Largest projected costs:**")
        lines.append("")
        for driver in forecast.drivers:
            lines.append(f"- {driver.label}: {_money(driver.amount, currency)}")
        lines.append("")
    if forecast.summary:
        lines.append(forecast.summary)
        lines.append("")
    return lines


def render_analytics_markdown(report: AnalyticsReport) -> str:
    """Render an AnalyticsReport as Markdown."""
    currency = report.currency
    lines: list[str] = []

    # Header
    lines.append("# 📈 MarginPilot Analytics Report")
    lines.append("")
    lines.append(f"*Generated: {report.generated_at.strftime('%Y-%m-%d %H:%M')}*")
    lines.append(f"*Period: {report.period_start} to {report.period_end}*")
    lines.append("")

    # Totals
    lines.append("## 📊 Summary")
    lines.append("")
    lines.append("| Metric | Value |")
    lines.append("|--------|-------|")
    lines.append(f"| **Revenue** | {_money(report.total_revenue, currency)} |")
    lines.append(f"| **Cost** | {_money(report.total_cost, currency)} |")
    lines.append(f"| **Profit** | {_money(report.total_profit, currency)} |")
    lines.append(f"| **Margin** | {report.margin:.1f}% |")
    lines.append(f"| **Orders** | {report.order_count} |")
    lines.append(f"| **Average Check** | {_money(report.average_check, currency)} |")
    lines.append("")

    if report.category_totals:
        lines.append("## 🗂️ Revenue by Category")
        lines.append("")
        lines.append("| Category | Revenue |")
        lines.append("|----------|---------|")
        for category in report.category_totals:
            lines.append(f"| {category.name} | {_money(category.revenue, currency)} |")
        lines.append("")

    # Items
    lines.append("## 🍔 Menu Items")
    lines.append("")
    lines += _item_table("Top by Revenue", report.top_items_by_revenue, currency)
    lines += _item_table("Top by Profit", report.top_items_by_profit, currency)
    lines += _item_table("Best Sellers", report.top_selling_items, currency)
    lines += _item_table("Slowest Sellers", report.worst_selling_items, currency)
    lines += _item_table("Highest Margin", report.highest_margin_items, currency)
    lines += _item_table("Lowest Margin", report.lowest_margin_items, currency)

    lines += _combo_table(report.top_combos)

    # Menu engineering
    lines.append("## 🧭 Menu Engineering")
    lines.append("")
    lines.append("| Quadrant | Items | Recommendation |")
    lines.append("|----------|-------|----------------|")
    for quadrant in Quadrant:
        count = report.quadrants.counts.get(quadrant, 0)
        lines.append(f"| {_QUADRANT_EMOJI[quadrant]} {quadrant.value.title()} | {count} | {RECOMMENDATIONS[quadrant]} |")
    lines.append("")
    for quadrant in Quadrant:
        names = [e.name for e in report.quadrants.items if e.quadrant == quadrant]
        if names:
            lines.append(f"- **{quadrant.value.title()}**: {', '.join(names)}")
    lines.append("")

    # P&L
    lines.append("## 💰 Profit & Loss")
    lines.append("")
    lines += _profit_loss_table(report.profit_loss, currency)

    # Footer
    lines.append("---")
    lines.append("*Report generated by MarginPilot*")

    return "\n".join(lines)


def render_dashboard_markdown(summary: DashboardSummary) -> str:
    """Render a DashboardSummary as Markdown."""
    currency = summary.currency
    lines: list[str] = []

    lines.append("# 🏪 MarginPilot Dashboard")
    lines.append("")
    lines.append(f"*As of: {summary.as_of.strftime('%Y-%m-%d %H:%M')}*")
    lines.append("")

    # Today / week
    today = summary.today
    week = summary.week
    lines.append("## 📅 Today & This Week")
    lines.append("")
    lines.append("| Metric | Value |")
    lines.append("|--------|-------|")
    lines.append(f"| **Today's Revenue** | {_money(today.revenue, currency)} ({today.growth:+.1f}% vs yesterday) |")
    lines.append(f"| **Today's Orders** | {today.orders} |")
    lines.append(f"| **Today's Margin** | {today.margin:.1f}% |")
    lines.append(f"| **7-Day Revenue** | {_money(week.revenue, currency)} |")
    lines.append(f"| **7-Day Orders** | {week.orders} |")
    if summary.busiest_hour:
        peak = summary.busiest_hour
        lines.append(f"| **Busiest Hour** | {peak.hour:02d}:00 ({peak.orders} orders) |")
    lines.append("")

    if week.trend:
        lines.append("| Day | Revenue | Orders |")
        lines.append("|-----|---------|--------|")
        for point in week.trend:
            lines.append(f"| {point.date.strftime('%a %d')} | {_money(point.revenue, currency)} | {point.orders} |")
        lines.append("")

    # Month to date
    lines.append(f"## 💰 Month to Date ({summary.month_orders} orders)")
    lines.append("")
    lines += _profit_loss_table(summary.month, currency)
    lines += _forecast_section(summary.forecast, currency)

    lines.append("## 🍔 Menu Items (month to date)")
    lines.append("")
    lines += _item_table("Best Sellers", summary.top_selling_items, currency)
    lines += _item_table("Slowest Sellers", summary.worst_selling_items, currency)
    lines += _item_table("Highest Margin", summary.highest_margin_items, currency)
    lines += _item_table("Lowest Margin", summary.lowest_margin_items, currency)
    lines += _combo_table(summary.top_combos)

    lines.append("## 🧭 Menu Engineering")
    lines.append("")
    lines.append(
        " | ".join(
            f"{_QUADRANT_EMOJI[q]} {q.value.title()}: {summary.quadrant_counts.get(q, 0)}" for q in Quadrant
        )
    )
    lines.append("")

    lines.append("---")
    lines.append("*Report generated by MarginPilot*")

    return "\n".join(lines)
