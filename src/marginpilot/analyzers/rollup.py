"""
Rollup Aggregator — revenue, cost, profit and margin over a set of sales.

One pass over completed sales builds every grouping at once:

1. **Totals** — revenue, cost, profit, margin for the whole record set.
2. **By day** — dense calendar-day series (zero-filled) for charts.
3. **By category** — revenue/cost per menu category.
4. **By menu item** — quantity, revenue, cost, profit, orders and a
   day-part histogram of units sold (for peak-time labelling).

Every "top N" view (by revenue, profit, quantity, margin) is a sort over the
same per-item records, never a re-scan of the source rows.

Revenue and cost always come from the line items' snapshot price and cost,
never from ``Sale.total`` or current ingredient prices.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from marginpilot.analyzers.proration import as_date, days_between_inclusive, within_window
from marginpilot.analyzers.time_of_day import SALES_DAY_PARTS, DayPartScheme
from marginpilot.models.records import MenuCatalog, Sale

logger = logging.getLogger("marginpilot.analyzers.rollup")


def margin_percent(profit: float, revenue: float) -> float:
    """Profit as a percentage of revenue, 0 when there is no revenue."""
    return (profit / revenue * 100) if revenue > 0 else 0.0


class RollupDimension(str, Enum):
    """Grouping key for a rollup."""

    DAY = "day"
    CATEGORY = "category"
    MENU_ITEM = "menu_item"


@dataclass
class RollupGroup:
    """Revenue and cost accumulated for one group key."""

    key: str
    label: str
    revenue: float = 0.0
    cost: float = 0.0
    quantity: int = 0

    @property
    def profit(self) -> float:
        return self.revenue - self.cost

    @property
    def margin(self) -> float:
        return margin_percent(self.profit, self.revenue)


@dataclass
class ItemStats:
    """Per-menu-item performance within the window."""

    menu_item_id: str
    name: str
    category: str = "Uncategorized"
    quantity: int = 0
    revenue: float = 0.0
    cost: float = 0.0
    orders: int = 0
    time_of_day: dict[str, int] = field(default_factory=dict)
    commonly_with: str | None = None

    @property
    def profit(self) -> float:
        return self.revenue - self.cost

    @property
    def margin(self) -> float:
        return margin_percent(self.profit, self.revenue)

    def top_time_of_day(self, day_parts: DayPartScheme = SALES_DAY_PARTS) -> str:
        return day_parts.top(self.time_of_day)


@dataclass
class DayPoint:
    """One calendar day of the revenue/cost series."""

    date: date
    revenue: float = 0.0
    cost: float = 0.0
    orders: int = 0

    @property
    def profit(self) -> float:
        return self.revenue - self.cost


@dataclass
class RollupResult:
    """All groupings of a single aggregation pass."""

    total_revenue: float = 0.0
    total_cost: float = 0.0
    order_count: int = 0
    day_series: list[DayPoint] = field(default_factory=list)
    categories: dict[str, RollupGroup] = field(default_factory=dict)
    items: dict[str, ItemStats] = field(default_factory=dict)
    day_parts: DayPartScheme = SALES_DAY_PARTS

    @property
    def total_profit(self) -> float:
        return self.total_revenue - self.total_cost

    @property
    def margin(self) -> float:
        return margin_percent(self.total_profit, self.total_revenue)

    @property
    def average_check(self) -> float:
        return self.total_revenue / self.order_count if self.order_count > 0 else 0.0

    def by_dimension(self, dimension: RollupDimension) -> list[RollupGroup]:
        """Grouped revenue/cost records for the requested dimension."""
        if dimension == RollupDimension.DAY:
            return [
                RollupGroup(key=d.date.isoformat(), label=d.date.isoformat(), revenue=d.revenue, cost=d.cost)
                for d in self.day_series
            ]
        if dimension == RollupDimension.CATEGORY:
            return list(self.categories.values())
        return [
            RollupGroup(key=s.menu_item_id, label=s.name, revenue=s.revenue, cost=s.cost, quantity=s.quantity)
            for s in self.items.values()
        ]

    # Top-N views, all sorted from ``items``

    def top_by_revenue(self, n: int = 10) -> list[ItemStats]:
        return sorted(self.items.values(), key=lambda s: s.revenue, reverse=True)[:n]

    def top_by_profit(self, n: int = 10) -> list[ItemStats]:
        return sorted(self.items.values(), key=lambda s: s.profit, reverse=True)[:n]

    def top_by_quantity(self, n: int = 10) -> list[ItemStats]:
        return sorted(self.items.values(), key=lambda s: s.quantity, reverse=True)[:n]

    def bottom_by_quantity(self, n: int = 10) -> list[ItemStats]:
        sold = [s for s in self.items.values() if s.quantity > 0]
        return sorted(sold, key=lambda s: s.quantity)[:n]

    def highest_margin(self, n: int = 10) -> list[ItemStats]:
        earning = [s for s in self.items.values() if s.revenue > 0]
        return sorted(earning, key=lambda s: s.margin, reverse=True)[:n]

    def lowest_margin(self, n: int = 10) -> list[ItemStats]:
        earning = [s for s in self.items.values() if s.revenue > 0]
        return sorted(earning, key=lambda s: s.margin)[:n]

    def top_categories(self, n: int = 6) -> list[RollupGroup]:
        return sorted(self.categories.values(), key=lambda g: g.revenue, reverse=True)[:n]


class RollupAggregator:
    """Aggregate completed sales into revenue/cost/profit rollups."""

    @classmethod
    def aggregate(
        cls,
        sales: Iterable[Sale],
        catalog: MenuCatalog | None = None,
        *,
        window_start: date | datetime | None = None,
        window_end: date | datetime | None = None,
        day_parts: DayPartScheme = SALES_DAY_PARTS,
    ) -> RollupResult:
        """Build totals, day series, category and item rollups in one pass.

        Args:
            sales: Sales with nested line items. Non-completed sales are ignored.
            catalog: Menu item / category lookups for labels. Missing entries
                are labelled "Unknown" / "Uncategorized".
            window_start: Start of the window (inclusive). Sales before it are
                skipped and the dense day series begins on its date.
            window_end: End of the window (inclusive).
            day_parts: Scheme used for the per-item time-of-day histogram.

        Returns:
            RollupResult with every grouping populated.
        """
        catalog = catalog or MenuCatalog()
        result = RollupResult(day_parts=day_parts)
        daily: dict[date, DayPoint] = {}
        skipped = 0

        for sale in sales:
            if not sale.is_completed:
                skipped += 1
                continue
            if not within_window(sale.timestamp, window_start, window_end):
                continue

            result.order_count += 1
            sale_day = sale.timestamp.date()
            day = daily.setdefault(sale_day, DayPoint(date=sale_day))
            day.orders += 1
            bucket = day_parts.bucket(sale.timestamp)
            seen_in_sale: set[str] = set()

            for line in sale.items:
                line_revenue = line.revenue
                line_cost = line.total_cost

                result.total_revenue += line_revenue
                result.total_cost += line_cost
                day.revenue += line_revenue
                day.cost += line_cost

                category_name = catalog.category_name(line.menu_item_id)
                group = result.categories.get(category_name)
                if group is None:
                    group = RollupGroup(key=category_name, label=category_name)
                    result.categories[category_name] = group
                group.revenue += line_revenue
                group.cost += line_cost
                group.quantity += line.quantity

                stats = result.items.get(line.menu_item_id)
                if stats is None:
                    stats = ItemStats(
                        menu_item_id=line.menu_item_id,
                        name=catalog.item_name(line.menu_item_id),
                        category=category_name,
                        time_of_day=day_parts.empty_histogram(),
                    )
                    result.items[line.menu_item_id] = stats
                stats.quantity += line.quantity
                stats.revenue += line_revenue
                stats.cost += line_cost
                stats.time_of_day[bucket] += line.quantity
                if line.menu_item_id not in seen_in_sale:
                    stats.orders += 1
                    seen_in_sale.add(line.menu_item_id)

        result.day_series = cls._dense_series(daily, window_start, window_end)

        if skipped:
            logger.debug("Ignored %d non-completed sales", skipped)
        logger.info(
            "Rollup complete: %d orders, %d items, revenue=%.2f",
            result.order_count,
            len(result.items),
            result.total_revenue,
        )
        return result

    @staticmethod
    def _dense_series(
        daily: dict[date, DayPoint],
        window_start: date | datetime | None,
        window_end: date | datetime | None,
    ) -> list[DayPoint]:
        """One entry per calendar day in the window, zero-filled."""
        if window_start is not None and window_end is not None:
            first, last = as_date(window_start), as_date(window_end)
        elif daily:
            first = as_date(window_start) if window_start is not None else min(daily)
            last = as_date(window_end) if window_end is not None else max(daily)
        else:
            return []

        if last < first:
            return []

        return [
            daily.get(first + timedelta(days=offset)) or DayPoint(date=first + timedelta(days=offset))
            for offset in range(days_between_inclusive(first, last))
        ]


def aggregate(
    sales: Iterable[Sale],
    catalog: MenuCatalog | None = None,
    **kwargs: object,
) -> RollupResult:
    """Convenience function for :meth:`RollupAggregator.aggregate`."""
    return RollupAggregator.aggregate(sales, catalog, **kwargs)  # type: ignore[arg-type]
