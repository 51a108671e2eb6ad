"""Connectors package — record sources."""
from marginpilot.connectors.base import BaseConnector, DataLoadError
from marginpilot.connectors.csv_connector import CSVConnector

__all__ = ["BaseConnector", "CSVConnector", "DataLoadError"]
