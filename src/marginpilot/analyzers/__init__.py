"""
MarginPilot Analyzers — pure computation modules.

Deterministic, in-memory engines over historical records. Each one takes
plain record lists and returns a structured result; none of them perform I/O.
"""

from marginpilot.analyzers.co_purchase import CoPurchaseMiner, CoPurchaseResult, mine_combos
from marginpilot.analyzers.forecast import ForecastResult, RunRateForecaster, forecast
from marginpilot.analyzers.profit_loss import PeriodFigures, ProfitLossCalculator
from marginpilot.analyzers.proration import expense_amount_in_window, total_recurring_in_window
from marginpilot.analyzers.quadrant import Quadrant, QuadrantClassifier, QuadrantResult, classify
from marginpilot.analyzers.rollup import RollupAggregator, RollupDimension, RollupResult, aggregate
from marginpilot.analyzers.time_of_day import CAROUSEL_SLOTS, SALES_DAY_PARTS, DayPartScheme, busiest_hour

__all__ = [
    "CAROUSEL_SLOTS",
    "SALES_DAY_PARTS",
    "CoPurchaseMiner",
    "CoPurchaseResult",
    "DayPartScheme",
    "ForecastResult",
    "PeriodFigures",
    "ProfitLossCalculator",
    "Quadrant",
    "QuadrantClassifier",
    "QuadrantResult",
    "RollupAggregator",
    "RollupDimension",
    "RollupResult",
    "RunRateForecaster",
    "aggregate",
    "busiest_hour",
    "classify",
    "expense_amount_in_window",
    "forecast",
    "mine_combos",
    "total_recurring_in_window",
]
