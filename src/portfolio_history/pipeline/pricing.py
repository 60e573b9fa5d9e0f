"""Historical and live price fetching with bounded fan-out."""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Awaitable, Callable, TypeVar

from ..adapters.price_adapters.base import BasePriceAdapter
from ..domain import PriceSeries, ResolvedAsset
from .context import PipelineContext

T = TypeVar("T")


async def _call_provider(
    ctx: PipelineContext,
    semaphore: asyncio.Semaphore,
    adapter: BasePriceAdapter,
    what: str,
    price_feed_id: str,
    call: Callable[[], Awaitable[T]],
) -> T | None:
    """Run one provider call under the fan-out cap and its own timeout.

    Timeouts and unexpected errors become ``None`` so sibling work continues.
    """
    s = ctx.state.settings
    log = ctx.state.logger
    async with semaphore:
        try:
            async with asyncio.timeout(s.provider_timeout_seconds):
                return await call()
        except TimeoutError:
            log.warning(
                "%s for %s from '%s' timed out after %.1fs",
                what,
                price_feed_id,
                adapter.adapter_name,
                s.provider_timeout_seconds,
            )
        except Exception as e:
            log.warning(
                "%s for %s from '%s' failed: %s",
                what,
                price_feed_id,
                adapter.adapter_name,
                e,
            )
    return None


async def fetch_price_history(
    ctx: PipelineContext, semaphore: asyncio.Semaphore, asset: ResolvedAsset
) -> PriceSeries | None:
    """Daily series for one asset: cache first, then providers in priority order.

    One extra day is requested so the day before the window can seed the
    backward price fallback.
    """
    log = ctx.state.logger
    cache = ctx.state.price_cache
    feed_id = asset.price_feed_id
    days = ctx.timeframe.days + 1

    cached = cache.get(feed_id, days)
    if cached is not None:
        log.debug("%s: price series served from cache", feed_id)
        return cached

    for adapter in ctx.adapters.prices:
        if not adapter.supports(feed_id):
            continue
        series = await _call_provider(
            ctx,
            semaphore,
            adapter,
            "Daily series",
            feed_id,
            lambda: adapter.fetch_daily_series(
                feed_id, days, end_date=ctx.today
            ),
        )
        if series:
            log.info(
                "%s: %d daily prices from '%s'", feed_id, len(series), adapter.adapter_name
            )
            cache.put(feed_id, days, series)
            return series
        log.debug("%s: no daily prices from '%s'", feed_id, adapter.adapter_name)

    log.warning("%s (%s): no historical prices from any provider", feed_id, asset.symbol)
    return None


async def fetch_live_price(
    ctx: PipelineContext, semaphore: asyncio.Semaphore, asset: ResolvedAsset
) -> Decimal | None:
    """Current price for one asset from the first provider that has it."""
    feed_id = asset.price_feed_id
    for adapter in ctx.adapters.prices:
        if not adapter.supports(feed_id):
            continue
        price = await _call_provider(
            ctx,
            semaphore,
            adapter,
            "Live price",
            feed_id,
            lambda: adapter.fetch_live_price(feed_id),
        )
        if price is not None and price > 0:
            return price
    ctx.state.logger.warning("%s (%s): no live price available", feed_id, asset.symbol)
    return None


async def price_assets(ctx: PipelineContext) -> None:
    """Fetch daily series and live prices for every resolved asset.

    Args:
        ctx: Pipeline context containing resolved assets

    Sets price series and live prices in the context. Assets with no data
    are simply absent from the maps.
    """
    s = ctx.state.settings
    log = ctx.state.logger
    assets = ctx.assets_required
    semaphore = asyncio.Semaphore(s.price_max_concurrent_calls)

    log.info(
        "Fetching prices for %d assets (max %d concurrent calls)...",
        len(assets),
        s.price_max_concurrent_calls,
    )

    groups = [
        asyncio.gather(
            *(fetch_price_history(ctx, semaphore, asset) for asset in assets),
            return_exceptions=True,
        )
    ]
    if s.live_snapshot_enabled:
        groups.append(
            asyncio.gather(
                *(fetch_live_price(ctx, semaphore, asset) for asset in assets),
                return_exceptions=True,
            )
        )
    results = await asyncio.gather(*groups)
    histories = results[0]
    lives = results[1] if s.live_snapshot_enabled else [None] * len(assets)

    for asset, series, live in zip(assets, histories, lives):
        feed_id = asset.price_feed_id
        if isinstance(series, BaseException):
            log.error("Price history for %s raised: %s", feed_id, series)
        elif series:
            ctx.price_series[feed_id] = series
        if isinstance(live, BaseException):
            log.error("Live price for %s raised: %s", feed_id, live)
        elif live is not None:
            ctx.live_prices[feed_id] = live

    log.debug(
        "Priced %d/%d assets historically, %d live",
        len(ctx.price_series),
        len(assets),
        len(ctx.live_prices),
    )
