from __future__ import annotations

import random

import pytest

from daily_pnl_dashboard.accounting import merge_fills
from daily_pnl_dashboard.types import Fill, Side


def _fill(
    fill_id: int,
    order_id: str,
    price: float,
    qty: float,
    time_ms: int,
    side: Side = Side.BUY,
    fee: float = 0.0,
    fee_currency: str = "BNB",
) -> Fill:
    return Fill(
        fill_id=str(fill_id),
        order_id=order_id,
        symbol="SOLUSDT",
        side=side,
        price=price,
        quantity=qty,
        quote_quantity=price * qty,
        fee=fee,
        fee_currency=fee_currency,
        is_maker=False,
        time_ms=time_ms,
    )


def test_partial_fills_of_one_order_are_merged() -> None:
    orders = merge_fills(
        [
            _fill(1, "A", 100.0, 0.4, 10, fee=0.0001),
            _fill(2, "A", 100.0, 0.6, 11, fee=0.0002),
        ]
    )
    assert len(orders) == 1
    order = orders[0]
    assert order.quantity == pytest.approx(1.0)
    assert order.quote_quantity == pytest.approx(100.0)
    assert order.fill_count == 2
    assert order.time_ms == 10
    assert order.fee_currency == "BNB"
    assert order.fee == pytest.approx(0.0003)


def test_same_order_at_different_price_levels_stays_separate() -> None:
    orders = merge_fills(
        [
            _fill(1, "A", 100.0, 0.5, 10),
            _fill(2, "A", 100.5, 0.5, 11),
        ]
    )
    assert [(o.price, o.quantity) for o in orders] == [(100.0, 0.5), (100.5, 0.5)]


def test_interleaved_order_breaks_merge_run() -> None:
    orders = merge_fills(
        [
            _fill(1, "A", 100.0, 0.5, 10),
            _fill(2, "B", 101.0, 0.5, 11, side=Side.SELL),
            _fill(3, "A", 100.0, 0.5, 12),
        ]
    )
    assert [o.order_id for o in orders] == ["A", "B", "A"]


def test_merge_is_independent_of_input_order() -> None:
    fills = [
        _fill(1, "A", 100.0, 0.2, 1),
        _fill(2, "A", 100.0, 0.3, 2),
        _fill(3, "B", 105.0, 0.4, 3, side=Side.SELL),
        _fill(4, "C", 99.0, 1.0, 4),
        _fill(5, "C", 99.0, 0.5, 5),
    ]
    expected = merge_fills(fills)
    shuffled = fills[:]
    random.Random(7).shuffle(shuffled)
    assert merge_fills(shuffled) == expected
    assert sum(o.quantity for o in expected) == pytest.approx(sum(f.quantity for f in fills))


def test_mixed_fee_currencies_are_kept_per_currency() -> None:
    orders = merge_fills(
        [
            _fill(1, "A", 100.0, 0.5, 10, fee=0.001, fee_currency="BNB"),
            _fill(2, "A", 100.0, 0.5, 11, fee=0.05, fee_currency="USDT"),
        ]
    )
    order = orders[0]
    assert order.fees == {"BNB": 0.001, "USDT": 0.05}
    assert order.fee_currency is None
    assert order.fee is None


def test_empty_input_yields_no_orders() -> None:
    assert merge_fills([]) == []


def _as_fills(order) -> list[Fill]:
    """One fill per fee currency; the whole quantity rides on the first one."""
    return [
        Fill(
            fill_id=f"{order.order_id}-{i}",
            order_id=order.order_id,
            symbol=order.symbol,
            side=order.side,
            price=order.price,
            quantity=order.quantity if i == 0 else 0.0,
            quote_quantity=order.quote_quantity if i == 0 else 0.0,
            fee=amount,
            fee_currency=currency,
            is_maker=False,
            time_ms=order.time_ms,
        )
        for i, (currency, amount) in enumerate(order.fees.items())
    ]


def test_merging_already_merged_records_changes_nothing() -> None:
    first = merge_fills(
        [
            _fill(1, "A", 100.0, 0.5, 1, fee=0.001),
            _fill(2, "A", 100.0, 0.5, 2, fee=0.001),
            _fill(3, "B", 101.0, 0.7, 3, side=Side.SELL, fee=0.002),
            _fill(4, "B", 101.0, 0.3, 4, side=Side.SELL, fee=0.03, fee_currency="USDT"),
        ]
    )
    assert first[1].fees == {"BNB": 0.002, "USDT": 0.03}
    second = merge_fills([fill for order in first for fill in _as_fills(order)])
    assert [(o.order_id, o.side, o.price, o.quantity, o.fees) for o in second] == [
        (o.order_id, o.side, o.price, o.quantity, o.fees) for o in first
    ]
