"""
Base connector — abstract interface for all record sources.

Connectors are the bridge between MarginPilot and a restaurant's back-office
data. They read sales, expenses, waste, payroll and meal-prep records from a
store (CSV exports, a database, a POS API) and normalize them into a
ReportDataset the engine can analyse.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from marginpilot.models.records import ReportDataset


class DataLoadError(RuntimeError):
    """Raised when a connector cannot produce a dataset at all."""


class BaseConnector(ABC):
    """Abstract base class for all data connectors.

    To create a new connector, subclass this and implement:
    - `name`: Unique connector identifier.
    - `pull()`: Async method that returns a ReportDataset.
    - `validate_credentials()`: Check the source is reachable.

    Example::

        class MyPOSConnector(BaseConnector):
            name = "my_pos"

            async def pull(self, window_start=None, window_end=None) -> ReportDataset:
                ...

            async def validate_credentials(self) -> bool:
                ...
    """

    name: str = "base"
    description: str = "Base connector"

    def __init__(self, credentials: dict[str, Any] | None = None, **options: Any) -> None:
        self.credentials = credentials or {}
        self.options = options

    @abstractmethod
    async def pull(
        self,
        window_start: date | datetime | None = None,
        window_end: date | datetime | None = None,
    ) -> ReportDataset:
        """Load records from the source.

        Args:
            window_start: Drop dated records before this moment (inclusive bound).
            window_end: Drop dated records after this moment (inclusive bound).

        Returns:
            Normalized ReportDataset.

        Raises:
            DataLoadError: If the source cannot be read.
        """
        ...

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Validate that the source is accessible."""
        ...
