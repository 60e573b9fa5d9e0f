from datetime import date
from decimal import Decimal

from portfolio_history.domain import PriceSeries, window_dates
from portfolio_history.processors.valuation import PriceLookup, value_balances, value_series

DATES = window_dates(date(2024, 6, 15), 7)


def _series(feed_id: str, prices: dict[date, str]) -> PriceSeries:
    return PriceSeries(
        price_feed_id=feed_id,
        source="test",
        prices={day: Decimal(price) for day, price in prices.items()},
    )


def test_exact_price_used_when_present():
    lookup = PriceLookup({"aptos": _series("aptos", {DATES[3]: "5"})})

    assert lookup.resolve("aptos", DATES[3]) == Decimal("5")


def test_backward_fallback_uses_earlier_price_never_later():
    lookup = PriceLookup(
        {"aptos": _series("aptos", {DATES[2]: "4", DATES[5]: "9"})}
    )

    assert lookup.resolve("aptos", DATES[4]) == Decimal("4")
    assert lookup.resolve("aptos", DATES[3]) == Decimal("4")


def test_no_earlier_price_falls_back_to_base_price():
    lookup = PriceLookup(
        {"aptos": _series("aptos", {DATES[5]: "9"})},
        base_prices={"aptos": Decimal("7")},
    )

    assert lookup.historical("aptos", DATES[0]) is None
    assert lookup.resolve("aptos", DATES[0]) == Decimal("7")


def test_unpriced_asset_values_at_zero():
    lookup = PriceLookup({})

    assert lookup.resolve("ghost", DATES[0]) == Decimal(0)


def test_value_balances_skips_zero_balances():
    lookup = PriceLookup({"aptos": _series("aptos", {DATES[0]: "5"})})

    total = value_balances(
        {"aptos": Decimal("2"), "ghost": Decimal("0")}, DATES[0], lookup
    )

    assert total == Decimal("10")


def test_value_series_one_point_per_day_rounded_to_cents():
    prices = {d: "1.234567" for d in DATES}
    lookup = PriceLookup({"aptos": _series("aptos", prices)})
    snapshots = {d: {"aptos": Decimal("3")} for d in DATES}

    series = value_series(snapshots, DATES, lookup)

    assert [p.date for p in series] == DATES
    assert {p.value_usd for p in series} == {Decimal("3.70")}


def test_value_series_missing_snapshot_is_zero():
    lookup = PriceLookup({})

    series = value_series({}, DATES, lookup)

    assert [p.value_usd for p in series] == [Decimal("0.00")] * 7
    assert series[0].to_dict() == {"date": DATES[0].isoformat(), "value": 0.0}
