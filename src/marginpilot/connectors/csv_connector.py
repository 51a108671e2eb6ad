"""
CSV Connector — load back-office records from a directory of CSV exports.

Expected layout (only ``sales.csv`` is required)::

    data/
      sales.csv                 id, timestamp, total, status, table_id, waiter_id
      sale_items.csv            id, sale_id, menu_item_id, quantity, price, cost
      expenses.csv              id, name, category, amount, cadence, start_date, end_date
      expense_transactions.csv  id, date, amount, category, notes
      waste_records.csv         id, date, cost, ingredient_id, reason
      payroll.csv               id, employee_id, period, paid_date, total_paid, status
      meal_prep_usages.csv      session_id, prep_date, ingredient_id, quantity_used, cost_per_unit
      menu_items.csv            id, name, category_id
      categories.csv            id, name

Malformed rows are skipped and logged; one bad row never aborts the load.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import ValidationError

from marginpilot.analyzers.proration import within_window
from marginpilot.connectors.base import BaseConnector, DataLoadError
from marginpilot.models.records import (
    Category,
    Expense,
    ExpenseTransaction,
    IngredientUsage,
    MealPrepSession,
    MenuCatalog,
    MenuItem,
    Payroll,
    ReportDataset,
    Sale,
    SaleItem,
    WasteRecord,
)

logger = logging.getLogger("marginpilot.connectors.csv")

_ENUM_COLUMNS = ("status", "cadence")
_DATE_COLUMNS = ("date", "start_date", "end_date", "period", "paid_date", "prep_date")


class CSVConnector(BaseConnector):
    """Load a ReportDataset from a directory of CSV files.

    Usage::

        connector = CSVConnector(directory="exports/")
        dataset = await connector.pull()
    """

    name = "csv"
    description = "Load records from a directory of CSV exports"

    def __init__(
        self,
        credentials: dict[str, Any] | None = None,
        directory: str | None = None,
        **options: Any,
    ) -> None:
        super().__init__(credentials, **options)
        creds = credentials or {}
        self.directory = directory or options.get("directory") or creds.get("directory", "")
        self.encoding = options.get("encoding", "utf-8")
        self.delimiter = options.get("delimiter", ",")

    async def pull(
        self,
        window_start: date | datetime | None = None,
        window_end: date | datetime | None = None,
    ) -> ReportDataset:
        """Read every CSV in the directory into a ReportDataset."""
        root = Path(self.directory)
        if not root.is_dir():
            raise DataLoadError(f"Data directory not found: {self.directory}")

        sales_path = root / "sales.csv"
        if not sales_path.exists():
            raise DataLoadError(f"sales.csv not found in {self.directory}")
        try:
            sales_df = self._read(sales_path)
        except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise DataLoadError(f"Cannot read {sales_path}: {e}") from e

        def in_window(moment: date | datetime) -> bool:
            return within_window(moment, window_start, window_end)

        items_by_sale = self._parse_sale_items(self._read_optional(root / "sale_items.csv"))
        sales = [s for s in self._parse_sales(sales_df, items_by_sale) if in_window(s.timestamp)]

        dataset = ReportDataset(
            sales=sales,
            expenses=self._parse_models(self._read_optional(root / "expenses.csv"), Expense),
            expense_transactions=[
                t
                for t in self._parse_models(self._read_optional(root / "expense_transactions.csv"), ExpenseTransaction)
                if in_window(t.date)
            ],
            waste_records=[
                w
                for w in self._parse_models(self._read_optional(root / "waste_records.csv"), WasteRecord)
                if in_window(w.date)
            ],
            payrolls=[
                p for p in self._parse_models(self._read_optional(root / "payroll.csv"), Payroll) if in_window(p.period)
            ],
            meal_prep_sessions=[
                m
                for m in self._parse_meal_prep(self._read_optional(root / "meal_prep_usages.csv"))
                if in_window(m.prep_date)
            ],
            catalog=MenuCatalog.from_lists(
                menu_items=self._parse_models(self._read_optional(root / "menu_items.csv"), MenuItem),
                categories=self._parse_models(self._read_optional(root / "categories.csv"), Category),
            ),
            source=f"csv:{root.name}",
        )

        logger.info(
            "Loaded %d sales, %d expenses, %d transactions, %d waste records, %d payrolls from %s",
            len(dataset.sales),
            len(dataset.expenses),
            len(dataset.expense_transactions),
            len(dataset.waste_records),
            len(dataset.payrolls),
            root,
        )
        return dataset

    async def validate_credentials(self) -> bool:
        """Check the directory exists and holds a sales.csv."""
        root = Path(self.directory)
        return root.is_dir() and (root / "sales.csv").is_file()

    # ------------------------------------------------------------------
    # Reading

    def _read(self, path: Path) -> pd.DataFrame:
        df = pd.read_csv(
            path,
            encoding=self.encoding,
            delimiter=self.delimiter,
            dtype=str,
            keep_default_na=False,
        )
        df.columns = df.columns.str.strip().str.lower()
        return df

    def _read_optional(self, path: Path) -> pd.DataFrame | None:
        if not path.exists():
            logger.debug("Optional file %s not present", path.name)
            return None
        try:
            return self._read(path)
        except pd.errors.EmptyDataError:
            return None
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            logger.warning("Cannot read %s, treating as empty: %s", path.name, e)
            return None

    @staticmethod
    def _rows(df: pd.DataFrame | None) -> Iterator[tuple[int, dict[str, Any]]]:
        """Yield (line number, row) pairs with blank cells dropped."""
        if df is None:
            return
        for index, row in enumerate(df.to_dict(orient="records"), start=2):
            cleaned: dict[str, Any] = {k: str(v).strip() for k, v in row.items() if str(v).strip() != ""}
            for column in _ENUM_COLUMNS:
                if column in cleaned:
                    cleaned[column] = cleaned[column].upper()
            yield index, cleaned

    @staticmethod
    def _coerce_dates(row: dict[str, Any]) -> dict[str, Any]:
        for column in _DATE_COLUMNS:
            if column in row:
                row[column] = pd.to_datetime(row[column]).date()
        return row

    # ------------------------------------------------------------------
    # Parsing

    def _parse_models(self, df: pd.DataFrame | None, model: type[Any]) -> list[Any]:
        records: list[Any] = []
        for index, row in self._rows(df):
            try:
                records.append(model.model_validate(self._coerce_dates(row)))
            except (ValueError, TypeError) as e:
                logger.debug("Skipping %s row %d: %s", model.__name__, index, e)
        return records

    def _parse_sale_items(self, df: pd.DataFrame | None) -> dict[str, list[SaleItem]]:
        items: dict[str, list[SaleItem]] = {}
        for index, row in self._rows(df):
            sale_id = row.pop("sale_id", None)
            if sale_id is None:
                logger.debug("Skipping SaleItem row %d: no sale_id", index)
                continue
            try:
                items.setdefault(sale_id, []).append(SaleItem.model_validate(row))
            except ValidationError as e:
                logger.debug("Skipping SaleItem row %d: %s", index, e)
        return items

    def _parse_sales(self, df: pd.DataFrame, items_by_sale: dict[str, list[SaleItem]]) -> list[Sale]:
        sales: list[Sale] = []
        for index, row in self._rows(df):
            try:
                timestamp = pd.to_datetime(row["timestamp"])
                if timestamp.tzinfo is not None:
                    # Sale times are naive local wall-clock time
                    timestamp = timestamp.tz_localize(None)
                row["timestamp"] = timestamp.to_pydatetime()
                row["items"] = items_by_sale.get(row.get("id", ""), [])
                sales.append(Sale.model_validate(row))
            except (KeyError, ValueError, TypeError) as e:
                logger.debug("Skipping Sale row %d: %s", index, e)
        return sales

    def _parse_meal_prep(self, df: pd.DataFrame | None) -> list[MealPrepSession]:
        sessions: dict[str, dict[str, Any]] = {}
        for index, row in self._rows(df):
            session_id = row.pop("session_id", None)
            if session_id is None or "prep_date" not in row:
                logger.debug("Skipping IngredientUsage row %d: no session_id/prep_date", index)
                continue
            try:
                prep_date = self._coerce_dates(row).pop("prep_date")
                usage = IngredientUsage.model_validate(row)
            except (ValueError, TypeError) as e:
                logger.debug("Skipping IngredientUsage row %d: %s", index, e)
                continue
            session = sessions.setdefault(session_id, {"id": session_id, "prep_date": prep_date, "usages": []})
            session["usages"].append(usage)
        return [MealPrepSession.model_validate(s) for s in sessions.values()]
