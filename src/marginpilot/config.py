"""
MarginPilot configuration management.

Supports loading from YAML files, environment variables, and keyword overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from marginpilot.analyzers.time_of_day import DayPartScheme


class DayPartConfig(BaseModel):
    """A labelled set of day-parts, each starting at an hour of the day."""

    name: str = "sales"
    labels: list[str] = Field(default_factory=lambda: ["Morning", "Afternoon", "Evening"])
    start_hours: list[int] = Field(default_factory=lambda: [0, 12, 17])

    @model_validator(mode="after")
    def _check_hours(self) -> DayPartConfig:
        if len(self.labels) != len(self.start_hours):
            raise ValueError("labels and start_hours must have the same length")
        if any(h < 0 or h > 23 for h in self.start_hours):
            raise ValueError("start_hours must be within 0-23")
        if any(b <= a for a, b in zip(self.start_hours, self.start_hours[1:])):
            raise ValueError("start_hours must be strictly increasing")
        return self

    def to_scheme(self) -> DayPartScheme:
        return DayPartScheme(name=self.name, labels=tuple(self.labels), start_hours=tuple(self.start_hours))


def _carousel_defaults() -> DayPartConfig:
    return DayPartConfig(name="carousel", labels=["Day", "Evening", "Night"], start_hours=[6, 12, 18])


class AnalyticsConfig(BaseModel):
    """Window and list sizes for the analytics surfaces."""

    trailing_days: int = Field(default=30, ge=1, description="Default analytics window length in days")
    top_n: int = Field(default=10, ge=1, description="Rows in each top/bottom item view")
    category_limit: int = Field(default=6, ge=1, description="Categories shown in the category breakdown")
    combo_limit: int = Field(default=10, ge=1, description="Item combos kept after sorting by count")


class ForecastConfig(BaseModel):
    max_drivers: int = Field(default=3, ge=1, le=3)


class ConnectorConfig(BaseModel):
    """Configuration for a single data connector."""

    type: str = Field(description="Connector type: csv, or a dotted class path")
    enabled: bool = True
    credentials: dict[str, Any] = Field(default_factory=dict)
    options: dict[str, Any] = Field(default_factory=dict)


class MarginPilotConfig(BaseModel):
    """Root configuration for MarginPilot."""

    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    day_parts: DayPartConfig = Field(default_factory=DayPartConfig)
    carousel_slots: DayPartConfig = Field(default_factory=_carousel_defaults)
    forecast: ForecastConfig = Field(default_factory=ForecastConfig)
    connectors: list[ConnectorConfig] = Field(default_factory=list)

    # Report settings
    currency: str = Field(default="USD")
    log_level: str = Field(default="WARNING")

    @classmethod
    def load(cls, config_path: str | None = None, **overrides: Any) -> MarginPilotConfig:
        """Load configuration from file, env vars, and overrides.

        Priority: overrides > env vars > config file > defaults.
        """
        data: dict[str, Any] = {}

        # 1. Load from YAML file if provided
        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

        # 2. Override from environment variables
        env_currency = os.environ.get("MARGINPILOT_CURRENCY")
        env_days = os.environ.get("MARGINPILOT_TRAILING_DAYS")
        env_level = os.environ.get("MARGINPILOT_LOG_LEVEL")

        if env_currency:
            data["currency"] = env_currency
        if env_level:
            data["log_level"] = env_level.upper()
        if env_days:
            analytics = data.get("analytics", {})
            analytics["trailing_days"] = int(env_days)
            data["analytics"] = analytics

        # 3. Apply keyword overrides
        data.update(overrides)

        return cls.model_validate(data)
