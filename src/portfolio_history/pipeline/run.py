"""High-level pipeline orchestration."""

from __future__ import annotations

import asyncio
from datetime import datetime
from decimal import Decimal

from ..domain import HistoricalDataPoint, Timeframe
from ..state import AppState
from .assets import collect_assets
from .context import PipelineAdapters, PipelineContext
from .flows import collect_flows
from .pricing import price_assets
from .valuation import build_series


def zero_series(ctx: PipelineContext) -> list[HistoricalDataPoint]:
    return [HistoricalDataPoint(date=day, value_usd=Decimal("0.00")) for day in ctx.dates]


async def run_history(
    state: AppState,
    address: str,
    timeframe: Timeframe,
    *,
    adapters: PipelineAdapters | None = None,
    now: datetime | None = None,
) -> list[HistoricalDataPoint]:
    """Compute the daily USD valuation series for a wallet.

    This is a thin orchestrator that sequences the pipeline steps:
    1. Balance collection and asset resolution (fatal on balance failure)
    2. Historical/live pricing and flow collection, concurrently
    3. Balance reconstruction, valuation and live snapshot injection

    Args:
        state: Application state containing settings, logger and price cache
        address: Normalized wallet address
        timeframe: Requested window
        adapters: External collaborators; defaults from settings
        now: Reference time; defaults to the current UTC time

    Returns:
        One point per calendar day in the window, ascending.

    Raises:
        BalanceSourceError: If current balances cannot be fetched
        asyncio.TimeoutError: If the global timeout is exceeded
    """
    s = state.settings
    log = state.logger

    ctx_kwargs = {"now": now} if now is not None else {}
    ctx = PipelineContext(
        state=state,
        address=address,
        timeframe=timeframe,
        adapters=adapters or PipelineAdapters.default(s),
        **ctx_kwargs,
    )

    log.info(
        "Starting portfolio history",
        extra={"address": address, "timeframe": timeframe.value},
    )

    timeout_s = s.global_timeout_seconds

    async def _run_pipeline() -> list[HistoricalDataPoint]:
        await collect_assets(ctx)
        if not ctx.assets_required:
            log.info("No priceable assets for %s; returning zero series", address)
            return zero_series(ctx)

        await asyncio.gather(price_assets(ctx), collect_flows(ctx))
        await build_series(ctx)
        return ctx.series_required

    try:
        if timeout_s is None or timeout_s <= 0:
            series = await _run_pipeline()
        else:
            async with asyncio.timeout(timeout_s):
                series = await _run_pipeline()
    except asyncio.TimeoutError as exc:
        log.error(
            "Portfolio history timed out",
            extra={"address": address, "timeout_seconds": timeout_s},
        )
        raise asyncio.TimeoutError(
            f"Portfolio history exceeded global timeout {timeout_s}s (address={address})"
        ) from exc

    log.info("Portfolio history completed", extra={"address": address})
    return series
