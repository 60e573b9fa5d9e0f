"""CLI entrypoint for portfolio history."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated

import typer

from .adapters.asset_adapters import BalanceSourceError
from .checks import RequestValidationError, normalize_address, parse_timeframe
from .logger import setup_logging
from .settings import HistorySettings, Network
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Daily USD valuation history for Aptos wallets.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("portfolio_history")


def _settings(ctx: typer.Context) -> HistorySettings:
    settings = ctx.obj
    if not isinstance(settings, HistorySettings):
        raise typer.BadParameter("settings were not loaded")
    return settings


@app.callback(invoke_without_command=True)
def configure(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [portfolio_history] table).",
        ),
    ] = None,
    network: Annotated[
        Network | None,
        typer.Option("--network", "-n", help="Network to use (mainnet or testnet)."),
    ] = None,
    use_flows: Annotated[
        bool | None,
        typer.Option(
            "--use-flows/--flat",
            help="Reconstruct balances from on-chain activity, or assume flat balances.",
        ),
    ] = None,
    live_snapshot: Annotated[
        bool | None,
        typer.Option(
            "--live-snapshot/--no-live-snapshot",
            help="Replace today's point with a live valuation when possible.",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Load configuration shared by every command."""
    if config_path:
        os.environ["PORTFOLIO_HISTORY_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Network | bool | str] = {}
    if network is not None:
        init_kwargs["network"] = network
    if use_flows is not None:
        init_kwargs["use_flows"] = use_flows
    if live_snapshot is not None:
        init_kwargs["live_snapshot_enabled"] = live_snapshot
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = HistorySettings(**init_kwargs)
    setup_logging(settings.log_level)

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    ctx.obj = settings


@app.command()
def history(
    ctx: typer.Context,
    address: Annotated[str, typer.Argument(help="Aptos account address.")],
    timeframe: Annotated[
        str, typer.Option("--timeframe", "-t", help="Window: 7D, 30D or 90D.")
    ] = "7D",
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the series as JSON instead of a table.")
    ] = False,
):
    """Compute the daily valuation series for ADDRESS."""
    settings = _settings(ctx)
    try:
        normalized = normalize_address(address)
        window = parse_timeframe(timeframe)
    except RequestValidationError as e:
        raise typer.BadParameter(str(e)) from e

    state = AppState.from_settings(settings, _build_logger())

    from .pipeline.run import run_history

    try:
        series = asyncio.run(run_history(state, normalized, window))
    except BalanceSourceError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from e
    except TimeoutError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=3) from e

    if as_json:
        typer.echo(json.dumps([point.to_dict() for point in series], indent=2))
        return

    from .report.formatter import format_history_table

    format_history_table(series, normalized, window)


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port.")] = None,
):
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from .api import create_app

    settings = _settings(ctx)
    uvicorn.run(
        create_app(settings, configure_logging=False),
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
