from __future__ import annotations

from daily_pnl_dashboard.accounting import normalize_fill, normalize_fills, parse_decimal, safe_percent
from daily_pnl_dashboard.types import Side


def test_normalize_fill_reads_exchange_row() -> None:
    fill = normalize_fill(
        {
            "id": 28457,
            "orderId": 100234,
            "symbol": "BTCUSDT",
            "price": "50000.10",
            "qty": "0.002",
            "quoteQty": "100.0002",
            "commission": "0.0000015",
            "commissionAsset": "bnb",
            "isBuyer": True,
            "isMaker": False,
            "time": 1767225600123,
        }
    )
    assert fill.fill_id == "28457"
    assert fill.order_id == "100234"
    assert fill.side == Side.BUY
    assert fill.price == 50000.10
    assert fill.quantity == 0.002
    assert fill.fee_currency == "BNB"
    assert fill.is_maker is False
    assert fill.time_ms == 1767225600123


def test_unparseable_numeric_fields_degrade_to_zero() -> None:
    fill = normalize_fill(
        {"id": 1, "orderId": 7, "price": "abc", "qty": None, "quoteQty": "", "commission": "nan", "isBuyer": False},
        symbol="ETHUSDT",
    )
    assert fill.symbol == "ETHUSDT"
    assert fill.side == Side.SELL
    assert fill.price == 0.0
    assert fill.quantity == 0.0
    assert fill.quote_quantity == 0.0
    assert fill.fee == 0.0


def test_string_flags_are_parsed() -> None:
    fills = normalize_fills(
        [
            {"id": 1, "orderId": 1, "price": "1", "qty": "1", "isBuyer": "true", "isMaker": "false"},
            {"id": 2, "orderId": 2, "price": "1", "qty": "1", "isBuyer": "false", "isMaker": "1"},
        ],
        symbol="XRPUSDT",
    )
    assert [f.side for f in fills] == [Side.BUY, Side.SELL]
    assert [f.is_maker for f in fills] == [False, True]


def test_numeric_helpers_are_zero_safe() -> None:
    assert parse_decimal("1.5") == 1.5
    assert parse_decimal("inf", default=2.0) == 2.0
    assert parse_decimal(True) == 0.0
    assert safe_percent(5.0, 0.0) == 0.0
    assert safe_percent(5.0, 200.0) == 2.5
