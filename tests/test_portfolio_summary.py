from __future__ import annotations

import pytest

from daily_pnl_dashboard.accounting import FeeValuer, reconcile_pair, summarize_portfolio, value_holdings
from daily_pnl_dashboard.types import AccountBalance

VALUER = FeeValuer(discount_price=600.0)


def _row(fill_id: int, order_id: int, price: str, qty: str, is_buyer: bool, time_ms: int, fee: str = "0") -> dict:
    quote = str(float(price) * float(qty))
    return {
        "id": fill_id,
        "orderId": order_id,
        "price": price,
        "qty": qty,
        "quoteQty": quote,
        "commission": fee,
        "commissionAsset": "USDT",
        "isBuyer": is_buyer,
        "time": time_ms,
    }


def test_portfolio_sums_pair_summaries() -> None:
    btc = reconcile_pair(
        "BTCUSDT",
        [_row(1, 1, "50000", "0.01", True, 1, fee="0.5"), _row(2, 2, "51000", "0.01", False, 2, fee="0.51")],
        mark_price=51000.0,
        fee_valuer=VALUER,
        now_ms=3,
    )
    sol = reconcile_pair(
        "SOLUSDT",
        [_row(3, 3, "150", "2", True, 1), _row(4, 3, "150", "1", True, 2)],
        mark_price=160.0,
        fee_valuer=VALUER,
        now_ms=3,
    )
    summary = summarize_portfolio([btc, sol])

    assert summary.pair_count == 2
    assert summary.total_trades == 3
    assert summary.total_fills == 4
    assert summary.total_volume == pytest.approx(500.0 + 510.0 + 450.0)
    assert summary.realized_pnl == pytest.approx(10.0 - 1.01)
    assert summary.unrealized_pnl == pytest.approx(30.0)
    assert summary.total_pnl == pytest.approx(summary.realized_pnl + summary.unrealized_pnl)
    assert summary.total_fees == pytest.approx(1.01)
    assert summary.fee_percent == pytest.approx(1.01 / 1460.0 * 100.0)


def test_empty_portfolio_has_zero_fee_percent() -> None:
    summary = summarize_portfolio([])
    assert summary.total_volume == 0.0
    assert summary.fee_percent == 0.0
    assert summary.to_dict()["total_pnl"] == 0.0


def test_holdings_valuation_prices_each_balance() -> None:
    valuation = value_holdings(
        [
            AccountBalance(asset="BTC", free=0.4, locked=0.1),
            AccountBalance(asset="USDT", free=250.0, locked=0.0),
            AccountBalance(asset="DOGE", free=0.0, locked=0.0),
            AccountBalance(asset="XYZ", free=10.0, locked=0.0),
        ],
        prices={"BTC": 50_000.0},
    )
    by_asset = {h.asset: h for h in valuation.holdings}
    assert set(by_asset) == {"BTC", "USDT", "XYZ"}
    assert by_asset["BTC"].value == pytest.approx(25_000.0)
    assert by_asset["USDT"].price == 1.0
    assert by_asset["XYZ"].value == 0.0
    assert valuation.total_value == pytest.approx(25_250.0)
    assert valuation.error is None
