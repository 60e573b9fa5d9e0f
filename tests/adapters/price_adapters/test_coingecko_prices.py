from datetime import date
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
import requests
from pydantic import SecretStr

from portfolio_history.adapters.price_adapters.coingecko import (
    CoinGeckoAdapter,
    parse_market_chart,
)
from portfolio_history.constants import STABLE_FEED_ID

JUNE_13_MS = 1718236800000
JUNE_14_MS = 1718323200000
JUNE_15_MS = 1718409600000


def _response(payload=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            response=response
        )
    return response


def test_parse_market_chart_keys_by_utc_date_latest_wins():
    series = parse_market_chart(
        "aptos",
        {
            "prices": [
                [JUNE_14_MS, 5.0],
                [JUNE_15_MS, 6.0],
                [JUNE_15_MS + 3_600_000, 6.5],
            ]
        },
    )

    assert series.prices == {
        date(2024, 6, 14): Decimal("5.0"),
        date(2024, 6, 15): Decimal("6.5"),
    }
    assert series.source == "coingecko"


def test_parse_market_chart_skips_bad_entries():
    series = parse_market_chart(
        "aptos",
        {"prices": [[JUNE_13_MS, 0], [JUNE_14_MS], ["x", 5.0], [JUNE_15_MS, "nan"], None]},
    )

    assert not series


def test_parse_market_chart_handles_non_dict_payload():
    assert len(parse_market_chart("aptos", ["unexpected"])) == 0


def test_stable_feed_not_supported(settings):
    assert not CoinGeckoAdapter(settings).supports(STABLE_FEED_ID)
    assert CoinGeckoAdapter(settings).supports("aptos")


@pytest.mark.asyncio
async def test_fetch_daily_series_requests_market_chart(settings):
    adapter = CoinGeckoAdapter(settings)
    payload = {"prices": [[JUNE_14_MS, 5.0], [JUNE_15_MS, 5.5]]}

    with patch(
        "portfolio_history.clients.http.requests.get",
        return_value=_response(payload),
    ) as mock_get:
        series = await adapter.fetch_daily_series("aptos", 8, end_date=date(2024, 6, 15))

    assert series is not None
    assert series.prices[date(2024, 6, 15)] == Decimal("5.5")
    args, kwargs = mock_get.call_args
    assert args[0].endswith("/coins/aptos/market_chart")
    assert kwargs["params"] == {"vs_currency": "usd", "days": 8, "interval": "daily"}


@pytest.mark.asyncio
async def test_api_key_sent_as_header(settings):
    settings.coingecko_api_key = SecretStr("demo-key")
    adapter = CoinGeckoAdapter(settings)

    with patch(
        "portfolio_history.clients.http.requests.get",
        return_value=_response({"aptos": {"usd": 5.2}}),
    ) as mock_get:
        await adapter.fetch_live_price("aptos")

    assert mock_get.call_args.kwargs["headers"]["x-cg-demo-api-key"] == "demo-key"


@pytest.mark.asyncio
async def test_fetch_daily_series_returns_none_on_http_error(settings):
    adapter = CoinGeckoAdapter(settings)

    with patch(
        "portfolio_history.clients.http.requests.get",
        return_value=_response(status_code=404),
    ):
        assert await adapter.fetch_daily_series("nope", 8, end_date=date(2024, 6, 15)) is None


@pytest.mark.asyncio
async def test_fetch_daily_series_returns_none_on_empty_prices(settings):
    adapter = CoinGeckoAdapter(settings)

    with patch(
        "portfolio_history.clients.http.requests.get",
        return_value=_response({"prices": []}),
    ):
        assert await adapter.fetch_daily_series("aptos", 8, end_date=date(2024, 6, 15)) is None


@pytest.mark.asyncio
async def test_fetch_live_price(settings):
    adapter = CoinGeckoAdapter(settings)

    with patch(
        "portfolio_history.clients.http.requests.get",
        return_value=_response({"aptos": {"usd": 5.25}}),
    ) as mock_get:
        price = await adapter.fetch_live_price("aptos")

    assert price == Decimal("5.25")
    assert mock_get.call_args.kwargs["params"] == {"ids": "aptos", "vs_currencies": "usd"}


@pytest.mark.asyncio
async def test_fetch_live_price_missing_entry(settings):
    adapter = CoinGeckoAdapter(settings)

    with patch(
        "portfolio_history.clients.http.requests.get",
        return_value=_response({}),
    ):
        assert await adapter.fetch_live_price("aptos") is None
