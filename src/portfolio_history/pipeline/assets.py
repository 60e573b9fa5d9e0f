"""Balance collection and asset resolution."""

from __future__ import annotations

import asyncio

from ..processors import needs_catalogue, resolve_assets
from .context import PipelineContext


async def _fetch_platform_map(ctx: PipelineContext) -> dict[str, str]:
    s = ctx.state.settings
    log = ctx.state.logger
    catalogue = ctx.adapters.catalogue
    try:
        async with asyncio.timeout(s.provider_timeout_seconds):
            return await catalogue.fetch_platform_map()
    except TimeoutError:
        log.warning(
            "Catalogue '%s' timed out after %.1fs",
            catalogue.adapter_name,
            s.provider_timeout_seconds,
        )
    except Exception as e:
        log.warning("Catalogue '%s' failed: %s", catalogue.adapter_name, e)
    return {}


async def collect_assets(ctx: PipelineContext) -> None:
    """Fetch current balances and resolve them to deduplicated priceable assets.

    Args:
        ctx: Pipeline context containing state and adapters

    Sets balances and resolved assets in the context.

    Raises:
        BalanceSourceError: If current balances cannot be fetched
    """
    log = ctx.state.logger

    log.info("Fetching current balances for %s...", ctx.address)
    balances = await ctx.adapters.balances.fetch_balances(ctx.address)
    log.debug("Balance source returned %d entries", len(balances))

    platform_map: dict[str, str] = {}
    if needs_catalogue(balances):
        log.info("Fetching asset catalogue...")
        platform_map = await _fetch_platform_map(ctx)

    ctx.balances = balances
    ctx.assets = resolve_assets(balances, platform_map)
