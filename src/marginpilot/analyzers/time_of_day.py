"""
Time-of-Day Classifier — map timestamps to day-part buckets.

Two schemes exist side by side and must not be conflated:

- ``SALES_DAY_PARTS`` (Morning / Afternoon / Evening) labels item and combo
  peak times in analytics.
- ``CAROUSEL_SLOTS`` (Day / Evening / Night) is the coarser mapping used by
  the menu carousel scheduler; Night wraps past midnight.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime

from marginpilot.models.records import Sale

logger = logging.getLogger("marginpilot.analyzers.time_of_day")


@dataclass(frozen=True)
class DayPartScheme:
    """An ordered set of labelled day-parts, each starting at a given hour.

    A bucket runs from its start hour up to the next bucket's start hour. Hours
    before the first start hour belong to the last bucket (wrap-around).
    Declaration order doubles as the tie-break order for :meth:`top`.
    """

    name: str
    labels: tuple[str, ...]
    start_hours: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.labels:
            raise ValueError(f"Day-part scheme {self.name!r} needs at least one label")
        if len(self.labels) != len(self.start_hours):
            raise ValueError(f"Day-part scheme {self.name!r}: labels and start_hours differ in length")
        if any(h < 0 or h > 23 for h in self.start_hours):
            raise ValueError(f"Day-part scheme {self.name!r}: start hours must be within 0-23")
        if any(b <= a for a, b in zip(self.start_hours, self.start_hours[1:])):
            raise ValueError(f"Day-part scheme {self.name!r}: start hours must be strictly increasing")

    def bucket(self, timestamp: datetime) -> str:
        """Label of the day-part containing ``timestamp``'s hour."""
        hour = timestamp.hour
        label = self.labels[-1]
        for start, candidate in zip(self.start_hours, self.labels):
            if hour >= start:
                label = candidate
            else:
                break
        return label

    def empty_histogram(self) -> dict[str, int]:
        return {label: 0 for label in self.labels}

    def top(self, histogram: Mapping[str, int]) -> str:
        """Bucket with the strictly greatest count; ties go to the earlier label."""
        top = self.labels[0]
        for label in self.labels[1:]:
            if histogram.get(label, 0) > histogram.get(top, 0):
                top = label
        return top


SALES_DAY_PARTS = DayPartScheme(
    name="sales",
    labels=("Morning", "Afternoon", "Evening"),
    start_hours=(0, 12, 17),
)

CAROUSEL_SLOTS = DayPartScheme(
    name="carousel",
    labels=("Day", "Evening", "Night"),
    start_hours=(6, 12, 18),
)


def bucket(timestamp: datetime) -> str:
    """Sales day-part for a timestamp."""
    return SALES_DAY_PARTS.bucket(timestamp)


def top_time_of_day(histogram: Mapping[str, int]) -> str:
    return SALES_DAY_PARTS.top(histogram)


@dataclass
class BusiestHour:
    hour: int
    orders: int
    revenue: float


def busiest_hour(sales: Iterable[Sale]) -> BusiestHour | None:
    """Hour of day with the most completed orders.

    Ties go to the hour whose first order appears earliest in ``sales``.
    """
    stats: dict[int, BusiestHour] = {}
    for sale in sales:
        if not sale.is_completed:
            continue
        hour = sale.timestamp.hour
        entry = stats.setdefault(hour, BusiestHour(hour=hour, orders=0, revenue=0.0))
        entry.orders += 1
        entry.revenue += sale.revenue

    if not stats:
        return None
    return max(stats.values(), key=lambda h: h.orders)
