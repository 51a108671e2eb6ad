"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from marginpilot import __version__
from marginpilot.cli import app

runner = CliRunner()

SALES_CSV = """id,timestamp,total,status
s1,2025-06-09 12:30:00,35.00,COMPLETED
s2,2025-06-10 19:05:00,15.00,COMPLETED
"""

SALE_ITEMS_CSV = """id,sale_id,menu_item_id,quantity,price,cost
i1,s1,burger,2,15.00,6.00
i2,s1,fries,1,5.00,1.00
i3,s2,burger,1,15.00,6.00
"""


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "exports"
    directory.mkdir()
    (directory / "sales.csv").write_text(SALES_CSV)
    (directory / "sale_items.csv").write_text(SALE_ITEMS_CSV)
    (directory / "menu_items.csv").write_text("id,name\nburger,House Burger\nfries,Fries\n")
    return directory


class TestCLI:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_analytics_help(self) -> None:
        result = runner.invoke(app, ["analytics", "--help"])
        assert result.exit_code == 0
        assert "--data" in result.output

    def test_analytics_json(self, data_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "report.json"
        result = runner.invoke(
            app,
            ["analytics", "--data", str(data_dir), "--start", "2025-06-01", "--end", "2025-06-10T23:59",
             "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["order_count"] == 2
        assert data["total_revenue"] == pytest.approx(50.0)
        assert data["top_items_by_revenue"][0]["name"] == "House Burger"

    def test_dashboard_markdown(self, data_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "dashboard.md"
        result = runner.invoke(
            app,
            ["dashboard", "--data", str(data_dir), "--as-of", "2025-06-10T21:00", "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        markdown = output.read_text()
        assert "MarginPilot Dashboard" in markdown
        assert "Month-End Forecast" in markdown

    def test_missing_data_directory(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["analytics", "--data", str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "Could not load report" in result.output

    def test_bad_date(self, data_dir: Path) -> None:
        result = runner.invoke(app, ["dashboard", "--data", str(data_dir), "--as-of", "yesterday"])
        assert result.exit_code == 1

    def test_date_only_end_covers_whole_day(self, data_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "report.json"
        result = runner.invoke(
            app,
            ["analytics", "--data", str(data_dir), "--start", "2025-06-01", "--end", "2025-06-10",
             "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["order_count"] == 2
        assert data["period_end"] == "2025-06-10"
        assert data["day_series"][-1]["revenue"] == pytest.approx(15.0)

    def test_date_only_as_of_is_end_of_day(self, data_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "dashboard.json"
        result = runner.invoke(
            app,
            ["dashboard", "--data", str(data_dir), "--as-of", "2025-06-10", "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["today"]["orders"] == 1

    def test_connector_from_config(self, data_dir: Path, tmp_path: Path) -> None:
        config_file = tmp_path / "marginpilot.yaml"
        config_file.write_text(f"connectors:\n  - type: csv\n    options:\n      directory: {data_dir}\n")
        output = tmp_path / "report.json"
        result = runner.invoke(
            app,
            ["analytics", "--config", str(config_file), "--start", "2025-06-01", "--end", "2025-06-10",
             "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text())["order_count"] == 2

    def test_no_data_source(self) -> None:
        result = runner.invoke(app, ["analytics"])
        assert result.exit_code == 1
        assert "--data" in result.output

    def test_unknown_connector_in_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "marginpilot.yaml"
        config_file.write_text("connectors:\n  - type: quickbooks\n")
        result = runner.invoke(app, ["analytics", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "quickbooks" in result.output
