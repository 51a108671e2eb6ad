"""
MarginPilot — profitability analytics and forecasting for restaurants.

Rollups, combos, menu engineering, P&L and month-end forecasts from
historical back-office records.
"""

__version__ = "0.1.0"
__all__ = ["ProfitabilityEngine"]

from marginpilot.engine import ProfitabilityEngine  # noqa: E402
