from decimal import Decimal

from portfolio_history.constants import (
    APT_COIN_TYPE,
    APT_FA_METADATA,
    NATIVE_FEED_ID,
    STABLE_FEED_ID,
)
from portfolio_history.domain import AssetBalance, AssetClass
from portfolio_history.processors.asset_resolver import (
    classify_asset,
    current_balances,
    needs_catalogue,
    resolve_assets,
)

USDC_TYPE = "0xbae207659db88bea0cbead6da0ed00aac12edcdda169e591cd41c94180b46f3b"
USDT_TYPE = "0x357b0b74bc833e95a115ad22604854d6b0fca151cecd94111770e5d6ffc9dc2b"
CELL_TYPE = "0x2ebb2ccac5e027a87fa0e2e5f656a3a4238d6a48d93ec9b610d570fc0aa0df12"


def _balance(asset_type: str, symbol: str, amount: str, decimals: int = 8) -> AssetBalance:
    return AssetBalance(
        asset_type=asset_type,
        symbol=symbol,
        decimals=decimals,
        current_balance=Decimal(amount),
    )


def test_classify_native_by_reserved_types():
    assert classify_asset(_balance(APT_COIN_TYPE, "APT", "1")) is AssetClass.NATIVE
    assert classify_asset(_balance("0xa", "APT", "1")) is AssetClass.NATIVE
    assert classify_asset(_balance(APT_FA_METADATA, "APT", "1")) is AssetClass.NATIVE


def test_classify_native_wins_over_symbol_and_fake_apt_is_other():
    assert classify_asset(_balance("0xdead::coin::APT", "APT", "1")) is AssetClass.OTHER


def test_classify_stable_symbols_case_insensitive():
    assert classify_asset(_balance(USDC_TYPE, "usdc", "1")) is AssetClass.STABLE
    assert classify_asset(_balance(USDT_TYPE, "USDT", "1")) is AssetClass.STABLE


def test_native_duplicates_keep_max_not_sum():
    assets = resolve_assets(
        [
            _balance(APT_COIN_TYPE, "APT", "100"),
            _balance(APT_FA_METADATA, "APT", "60"),
        ],
        {},
    )

    assert len(assets) == 1
    native = assets[0]
    assert native.price_feed_id == NATIVE_FEED_ID
    assert native.balance == Decimal("100")
    assert native.asset_types == (APT_COIN_TYPE, APT_FA_METADATA)


def test_native_duplicates_larger_second_entry_wins():
    assets = resolve_assets(
        [
            _balance(APT_COIN_TYPE, "APT", "10"),
            _balance(APT_FA_METADATA, "APT", "60"),
        ],
        {},
    )

    assert assets[0].balance == Decimal("60")
    assert assets[0].symbol == "APT"
    assert assets[0].asset_types == (APT_COIN_TYPE, APT_FA_METADATA)


def test_stable_entries_are_summed():
    assets = resolve_assets(
        [
            _balance(USDC_TYPE, "USDC", "25.5", decimals=6),
            _balance(USDT_TYPE, "USDT", "10", decimals=6),
        ],
        {},
    )

    assert len(assets) == 1
    stable = assets[0]
    assert stable.price_feed_id == STABLE_FEED_ID
    assert stable.asset_class is AssetClass.STABLE
    assert stable.balance == Decimal("35.5")
    assert stable.asset_types == (USDC_TYPE, USDT_TYPE)


def test_zero_balances_are_dropped():
    assets = resolve_assets(
        [
            _balance(APT_COIN_TYPE, "APT", "0"),
            _balance(USDC_TYPE, "USDC", "0"),
        ],
        {},
    )

    assert assets == []


def test_other_assets_resolved_through_catalogue_by_contract_address():
    assets = resolve_assets(
        [_balance(CELL_TYPE, "CELL", "42")],
        {CELL_TYPE: "cellana-finance"},
    )

    assert [a.price_feed_id for a in assets] == ["cellana-finance"]
    assert assets[0].asset_class is AssetClass.OTHER


def test_catalogue_lookup_uses_address_part_of_coin_type():
    coin_type = "0xABC123::token::TOKEN"
    assets = resolve_assets([_balance(coin_type, "TOK", "1")], {"0xabc123": "token-id"})

    assert assets[0].price_feed_id == "token-id"


def test_unpriceable_assets_are_dropped():
    assets = resolve_assets(
        [
            _balance(APT_COIN_TYPE, "APT", "1"),
            _balance("0xunknown::meme::MEME", "MEME", "1000"),
        ],
        {},
    )

    assert [a.price_feed_id for a in assets] == [NATIVE_FEED_ID]


def test_other_duplicates_keep_max():
    assets = resolve_assets(
        [
            _balance(CELL_TYPE, "CELL", "5"),
            _balance("0xother::cell::CELL", "CELL", "7"),
        ],
        {CELL_TYPE: "cellana-finance", "0xother": "cellana-finance"},
    )

    assert len(assets) == 1
    assert assets[0].balance == Decimal("7")


def test_needs_catalogue_only_for_nonzero_other_assets():
    assert not needs_catalogue([_balance(APT_COIN_TYPE, "APT", "1")])
    assert not needs_catalogue([_balance(CELL_TYPE, "CELL", "0")])
    assert needs_catalogue([_balance(CELL_TYPE, "CELL", "1")])


def test_current_balances_maps_feed_ids():
    assets = resolve_assets(
        [_balance(APT_COIN_TYPE, "APT", "3"), _balance(USDC_TYPE, "USDC", "4")], {}
    )

    assert current_balances(assets) == {
        NATIVE_FEED_ID: Decimal("3"),
        STABLE_FEED_ID: Decimal("4"),
    }
