"""
Co-Purchase Miner — which menu items are ordered together.

For every completed sale the distinct set of menu items is expanded into
unordered pairs. Each pair accumulates an occurrence count, the revenue and
profit of the sales it appeared in, and a day-part histogram. Each item also
remembers its single most frequent partner ("commonly ordered with").

Note: a pair is credited with the *whole* sale's revenue and profit, so a
three-item sale contributes its full total to each of its three pairs. Combo
revenue is therefore an "orders containing this pair" figure, not an
apportioned share.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import combinations

from marginpilot.analyzers.rollup import margin_percent
from marginpilot.analyzers.time_of_day import SALES_DAY_PARTS, DayPartScheme
from marginpilot.models.records import MenuCatalog, Sale

logger = logging.getLogger("marginpilot.analyzers.co_purchase")


@dataclass
class ComboStat:
    """Running statistics for one unordered pair of menu items."""

    item_ids: tuple[str, str]
    names: tuple[str, str] = ("Unknown", "Unknown")
    count: int = 0
    revenue: float = 0.0
    profit: float = 0.0
    time_of_day: dict[str, int] = field(default_factory=dict)
    top_time_of_day: str = ""

    @property
    def key(self) -> str:
        return "|".join(self.item_ids)

    @property
    def margin(self) -> float:
        return margin_percent(self.profit, self.revenue)


@dataclass
class PartnerStat:
    """The item most often ordered alongside another, and how often."""

    item: str
    count: int


@dataclass
class CoPurchaseResult:
    """Pairs, top combos and best partners mined from a set of sales."""

    pairs: dict[str, ComboStat] = field(default_factory=dict)
    combos: list[ComboStat] = field(default_factory=list)
    best_partner: dict[str, PartnerStat] = field(default_factory=dict)
    multi_item_orders: int = 0
    catalog: MenuCatalog = field(default_factory=MenuCatalog, repr=False)

    def commonly_with(self, menu_item_id: str) -> str | None:
        """Display name of the item's most frequent partner, if it has one."""
        partner = self.best_partner.get(menu_item_id)
        if partner is None:
            return None
        return self.catalog.item_name(partner.item)


class CoPurchaseMiner:
    """Mine pairwise item combinations from completed sales."""

    DEFAULT_LIMIT = 10

    @classmethod
    def mine(
        cls,
        sales: Iterable[Sale],
        catalog: MenuCatalog | None = None,
        *,
        limit: int = DEFAULT_LIMIT,
        day_parts: DayPartScheme = SALES_DAY_PARTS,
    ) -> CoPurchaseResult:
        """Build pair statistics and per-item best partners.

        Args:
            sales: Sales with nested line items. Non-completed sales are ignored.
            catalog: Lookups used to label combos ("Unknown" when missing).
            limit: Number of combos kept in ``combos`` (sorted by count).
            day_parts: Scheme for the per-pair time-of-day histogram.

        Returns:
            CoPurchaseResult with every pair, the top combos and best partners.
        """
        catalog = catalog or MenuCatalog()
        result = CoPurchaseResult(catalog=catalog)

        for sale in sales:
            if not sale.is_completed:
                continue

            unique_items = sorted({line.menu_item_id for line in sale.items})
            if len(unique_items) < 2:
                continue

            result.multi_item_orders += 1
            bucket = day_parts.bucket(sale.timestamp)
            sale_revenue = sale.revenue
            sale_profit = sale.profit

            for a, b in combinations(unique_items, 2):
                key = f"{a}|{b}"
                combo = result.pairs.get(key)
                if combo is None:
                    combo = ComboStat(
                        item_ids=(a, b),
                        names=(catalog.item_name(a), catalog.item_name(b)),
                        time_of_day=day_parts.empty_histogram(),
                    )
                    result.pairs[key] = combo

                combo.count += 1
                combo.revenue += sale_revenue
                combo.profit += sale_profit
                combo.time_of_day[bucket] += 1

                cls._update_partner(result.best_partner, a, b, combo.count)
                cls._update_partner(result.best_partner, b, a, combo.count)

        for combo in result.pairs.values():
            combo.top_time_of_day = day_parts.top(combo.time_of_day)

        result.combos = sorted(result.pairs.values(), key=lambda c: c.count, reverse=True)[:limit]

        logger.info(
            "Co-purchase mining complete: %d pairs from %d multi-item orders",
            len(result.pairs),
            result.multi_item_orders,
        )
        return result

    @staticmethod
    def _update_partner(best: dict[str, PartnerStat], primary: str, secondary: str, count: int) -> None:
        existing = best.get(primary)
        if existing is None or existing.count < count:
            best[primary] = PartnerStat(item=secondary, count=count)


def mine_combos(sales: Iterable[Sale], catalog: MenuCatalog | None = None, **kwargs: object) -> CoPurchaseResult:
    """Convenience function for :meth:`CoPurchaseMiner.mine`."""
    return CoPurchaseMiner.mine(sales, catalog, **kwargs)  # type: ignore[arg-type]
