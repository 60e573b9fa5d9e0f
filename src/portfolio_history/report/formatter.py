"""Rich console formatter for portfolio history series."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from ..domain import HistoricalDataPoint, Timeframe


def _truncate_address(address: str) -> str:
    """Truncate address for display."""
    return f"{address[:10]}...{address[-4:]}"


def _format_usd(value: Decimal) -> str:
    return f"${value:,.2f}"


def _format_change(current: Decimal, previous: Decimal | None) -> str:
    """Signed change against the previous value, coloured for the terminal."""
    if previous is None:
        return "[dim]-[/]"
    delta = current - previous
    if delta == 0:
        return "[dim]0.00[/]"
    colour = "green" if delta > 0 else "red"
    sign = "+" if delta > 0 else "-"
    if previous:
        pct = abs(delta) / previous * 100
        return f"[{colour}]{sign}{abs(delta):,.2f} ({sign}{pct:.2f}%)[/]"
    return f"[{colour}]{sign}{abs(delta):,.2f}[/]"


def format_history_table(
    series: Sequence[HistoricalDataPoint],
    address: str,
    timeframe: Timeframe,
    console: Console | None = None,
) -> None:
    """Print a summary panel and a per-day value table to the console.

    Args:
        series: Daily valuation points in ascending date order
        address: Wallet address the series belongs to
        timeframe: Requested window
        console: Target console; defaults to stdout
    """
    console = console or Console()

    summary = Table(show_header=False, box=None, padding=(0, 1))
    summary.add_column("Key", style="dim")
    summary.add_column("Value", style="cyan")
    summary.add_row("Address", _truncate_address(address))
    summary.add_row("Timeframe", timeframe.value)
    summary.add_row("Points", str(len(series)))
    if series:
        first, last = series[0], series[-1]
        summary.add_row("Start", f"{first.date.isoformat()}  {_format_usd(first.value_usd)}")
        summary.add_row("End", f"{last.date.isoformat()}  {_format_usd(last.value_usd)}")
        summary.add_row("Change", _format_change(last.value_usd, first.value_usd))

    summary_panel = Panel(summary, title="[bold]Portfolio[/]", border_style="blue")

    days = Table(expand=True, show_lines=False)
    days.add_column("Date", style="cyan", no_wrap=True)
    days.add_column("Value (USD)", justify="right", style="green")
    days.add_column("Daily Change", justify="right")

    previous: Decimal | None = None
    for point in series:
        days.add_row(
            point.date.isoformat(),
            _format_usd(point.value_usd),
            _format_change(point.value_usd, previous),
        )
        previous = point.value_usd

    days_panel = Panel(days, title="[bold]Daily Values[/]", border_style="cyan")

    console.print(Group(summary_panel, days_panel))
