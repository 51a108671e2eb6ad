"""
MarginPilot CLI — command-line interface.

Usage:
    marginpilot analytics --data exports/ --output report.md
    marginpilot dashboard --data exports/ --as-of "2025-06-10 21:00"
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from marginpilot import __version__

app = typer.Typer(
    name="marginpilot",
    help="📈 MarginPilot — profitability analytics for restaurants",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold]MarginPilot[/bold] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """📈 MarginPilot — what sold, what earned, where the month is heading."""


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _parse_moment(value: str | None, option: str) -> date | datetime | None:
    """Parse an ISO value; a bare date stays a date so it covers the whole day."""
    if not value:
        return None
    try:
        if "T" not in value and " " not in value.strip():
            return date.fromisoformat(value.strip())
        return datetime.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Error: {option} must be an ISO date or datetime, got {value!r}[/red]")
        raise typer.Exit(1) from None


def _load_engine(config: str | None, data: str | None):  # noqa: ANN202
    from marginpilot.config import ConnectorConfig
    from marginpilot.connectors.registry import create_connector
    from marginpilot.engine import ProfitabilityEngine

    config_path = config if config and Path(config).exists() else None
    engine = ProfitabilityEngine.from_config(config_path)
    _setup_logging(engine.config.log_level)

    if data:
        source = ConnectorConfig(type="csv", options={"directory": data})
    else:
        enabled = [c for c in engine.config.connectors if c.enabled]
        if not enabled:
            console.print("[red]Error: pass --data or configure a connector in the config file[/red]")
            raise typer.Exit(1)
        source = enabled[0]

    connector = create_connector(source)
    if connector is None:
        console.print(f"[red]Error: cannot load connector '{source.type}'[/red]")
        raise typer.Exit(1)
    return engine, connector


def _pull(connector, window_start=None, window_end=None):  # noqa: ANN001, ANN202
    from marginpilot.connectors.base import DataLoadError

    try:
        return asyncio.run(connector.pull(window_start, window_end))
    except DataLoadError as e:
        console.print(f"[red]Could not load report: {e}[/red]")
        raise typer.Exit(1) from None


@app.command()
def analytics(
    data: str = typer.Option(None, "--data", "-d", help="Directory of CSV exports (default: connector from config)"),
    start: str = typer.Option(None, "--start", help="Window start (ISO date/datetime)"),
    end: str = typer.Option(None, "--end", help="Window end (ISO date/datetime)"),
    config: str = typer.Option(None, "--config", "-c", help="Path to config file"),
    output: str = typer.Option(None, "--output", "-o", help="Output file path (.md, .json)"),
) -> None:
    """Build the full analytics report for a window (default: trailing 30 days)."""
    console.print(Panel.fit(
        "[bold blue]📈 MarginPilot[/bold blue] — Analytics Report",
        subtitle=f"v{__version__}",
    ))

    window_start = _parse_moment(start, "--start")
    window_end = _parse_moment(end, "--end")
    engine, connector = _load_engine(config, data)
    dataset = _pull(connector)

    with console.status("[bold green]Analysing...[/bold green]"):
        report = engine.analytics_report(dataset, window_start, window_end)

    table = Table(title=f"{report.period_start} to {report.period_end}", show_lines=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Revenue", f"{report.total_revenue:,.2f} {report.currency}")
    table.add_row("Profit", f"{report.total_profit:,.2f} {report.currency}")
    table.add_row("Margin", f"{report.margin:.1f}%")
    table.add_row("Orders", str(report.order_count))
    table.add_row("Net Profit (P&L)", f"{report.profit_loss.net_profit:,.2f} {report.currency}")
    console.print(table)

    if report.top_items_by_profit:
        console.print("[bold]Top items by profit:[/bold]")
        for i, item in enumerate(report.top_items_by_profit[:5], 1):
            console.print(f"  {i}. {item.name} — {item.profit:,.2f} ({item.margin:.1f}%)")
        console.print()

    if output:
        _save_report(report, output)


@app.command()
def dashboard(
    data: str = typer.Option(None, "--data", "-d", help="Directory of CSV exports (default: connector from config)"),
    as_of: str = typer.Option(None, "--as-of", help="Dashboard moment (ISO datetime, default now)"),
    config: str = typer.Option(None, "--config", "-c", help="Path to config file"),
    output: str = typer.Option(None, "--output", "-o", help="Output file path (.md, .json)"),
) -> None:
    """Show today, this week, month to date and the month-end forecast."""
    console.print(Panel.fit(
        "[bold blue]📈 MarginPilot[/bold blue] — Dashboard",
        subtitle=f"v{__version__}",
    ))

    moment = _parse_moment(as_of, "--as-of")
    if moment is not None and not isinstance(moment, datetime):
        moment = datetime.combine(moment, time.max)
    now = moment or datetime.now()
    engine, connector = _load_engine(config, data)
    dataset = _pull(connector)

    with console.status("[bold green]Analysing...[/bold green]"):
        summary = engine.dashboard_summary(dataset, now=now)

    currency = summary.currency
    table = Table(title=f"As of {now:%Y-%m-%d %H:%M}", show_lines=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Today", f"{summary.today.revenue:,.2f} {currency} ({summary.today.growth:+.1f}%)")
    table.add_row("Last 7 days", f"{summary.week.revenue:,.2f} {currency}")
    table.add_row("Month to date net", f"{summary.month.net_profit:,.2f} {currency}")
    table.add_row("Food cost", f"{summary.month.food_cost_percent:.1f}%")
    if summary.busiest_hour:
        table.add_row("Busiest hour", f"{summary.busiest_hour.hour:02d}:00")
    console.print(table)

    color = "red" if summary.forecast.is_loss else "green"
    console.print(f"[{color}]{summary.forecast.summary}[/{color}]")
    console.print()

    if output:
        _save_report(summary, output)


def _save_report(report, output: str) -> None:  # noqa: ANN001
    """Save report to file."""
    path = Path(output)
    if path.suffix == ".json":
        content = report.to_json()
    else:
        content = report.to_markdown()

    path.write_text(content)
    console.print(f"[green]✓[/green] Report saved to [bold]{path}[/bold]")


if __name__ == "__main__":
    app()
