"""
Quadrant Classifier — menu-engineering matrix over margin and popularity.

Each menu item that sold at least once in the window is placed in one of four
quadrants by comparing its margin % and units sold against the medians of the
eligible item set:

- Stars: margin ≥ median, units ≥ median → keep & feature
- Puzzles: margin ≥ median, units < median → reposition & promote
- Workhorses: margin < median, units ≥ median → re-price or re-cost
- Dogs: margin < median, units < median → candidates for removal

Ties at either median land on the "≥" side.
"""

from __future__ import annotations

import logging
import statistics
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from marginpilot.analyzers.rollup import ItemStats

logger = logging.getLogger("marginpilot.analyzers.quadrant")


class Quadrant(str, Enum):
    """Menu-engineering classification."""

    STAR = "STAR"  # High margin, high popularity
    PUZZLE = "PUZZLE"  # High margin, low popularity
    WORKHORSE = "WORKHORSE"  # Low margin, high popularity
    DOG = "DOG"  # Low margin, low popularity


# Menu display treatment per quadrant
DISPLAY_TIERS: dict[Quadrant, str] = {
    Quadrant.STAR: "hero",
    Quadrant.PUZZLE: "featured",
    Quadrant.WORKHORSE: "standard",
    Quadrant.DOG: "minimal",
}

RECOMMENDATIONS: dict[Quadrant, str] = {
    Quadrant.STAR: "Feature prominently and protect quality; this item drives profit.",
    Quadrant.PUZZLE: "High margin but rarely ordered: improve placement, naming or server upsell.",
    Quadrant.WORKHORSE: "Popular but thin margin: raise the price slightly or reduce portion cost.",
    Quadrant.DOG: "Low margin and low demand: rework the recipe or remove it from the menu.",
}


@dataclass
class QuadrantItem:
    """Classification of a single menu item."""

    menu_item_id: str
    name: str
    category: str
    quadrant: Quadrant
    margin_percent: float
    units_sold: int

    @property
    def display_tier(self) -> str:
        return DISPLAY_TIERS[self.quadrant]

    @property
    def recommendation(self) -> str:
        return RECOMMENDATIONS[self.quadrant]


@dataclass
class QuadrantResult:
    """Per-item quadrant labels plus aggregate counts."""

    labels: dict[str, Quadrant] = field(default_factory=dict)
    counts: dict[Quadrant, int] = field(default_factory=lambda: {q: 0 for q in Quadrant})
    items: list[QuadrantItem] = field(default_factory=list)
    median_margin: float = 0.0
    median_units: float = 0.0
    explanation: str = ""

    def items_in(self, quadrant: Quadrant) -> list[QuadrantItem]:
        return [i for i in self.items if i.quadrant == quadrant]


class QuadrantClassifier:
    """Classify menu items by margin and popularity against item-set medians."""

    @classmethod
    def classify(cls, item_stats: Iterable[ItemStats]) -> QuadrantResult:
        """Place every item with at least one unit sold into a quadrant.

        Args:
            item_stats: Per-item stats, typically ``RollupResult.items.values()``.

        Returns:
            QuadrantResult with labels, counts, classified items and the medians.
        """
        eligible = [s for s in item_stats if s.quantity >= 1]
        if not eligible:
            return QuadrantResult(explanation="No items sold in this period.")

        median_margin = statistics.median(s.margin for s in eligible)
        median_units = statistics.median(s.quantity for s in eligible)

        result = QuadrantResult(median_margin=median_margin, median_units=median_units)

        for stats in eligible:
            quadrant = cls._quadrant_for(stats.margin, stats.quantity, median_margin, median_units)
            result.labels[stats.menu_item_id] = quadrant
            result.counts[quadrant] += 1
            result.items.append(
                QuadrantItem(
                    menu_item_id=stats.menu_item_id,
                    name=stats.name,
                    category=stats.category,
                    quadrant=quadrant,
                    margin_percent=stats.margin,
                    units_sold=stats.quantity,
                )
            )

        result.explanation = cls._generate_summary(result)
        logger.info(
            "Quadrant classification complete: %d items (median margin %.1f%%, median units %.1f)",
            len(result.items),
            median_margin,
            median_units,
        )
        return result

    @staticmethod
    def _quadrant_for(margin: float, units: int, median_margin: float, median_units: float) -> Quadrant:
        high_margin = margin >= median_margin
        popular = units >= median_units
        if high_margin and popular:
            return Quadrant.STAR
        if high_margin:
            return Quadrant.PUZZLE
        if popular:
            return Quadrant.WORKHORSE
        return Quadrant.DOG

    @staticmethod
    def _generate_summary(result: QuadrantResult) -> str:
        total = len(result.items)
        counts = result.counts
        summary = (
            f"{total} items classified: "
            f"{counts[Quadrant.STAR]} stars, {counts[Quadrant.PUZZLE]} puzzles, "
            f"{counts[Quadrant.WORKHORSE]} workhorses, {counts[Quadrant.DOG]} dogs."
        )
        if total and counts[Quadrant.DOG] / total > 0.3:
            summary += " Over 30% of sold items are dogs; consider simplifying the menu."
        return summary


def classify(item_stats: Iterable[ItemStats]) -> QuadrantResult:
    """Convenience function for :meth:`QuadrantClassifier.classify`."""
    return QuadrantClassifier.classify(item_stats)
