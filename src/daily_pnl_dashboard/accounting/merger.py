"""Collapse partial fills of one order into order-level records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from daily_pnl_dashboard.types import Fill, MergedOrder, Side


@dataclass(slots=True)
class _Accumulator:
    order_id: str
    symbol: str
    side: Side
    price: float
    time_ms: int
    quantity: float = 0.0
    quote_quantity: float = 0.0
    fees: dict[str, float] = field(default_factory=dict)
    fill_count: int = 0

    def accepts(self, fill: Fill) -> bool:
        return fill.order_id == self.order_id and fill.side == self.side and fill.price == self.price

    def add(self, fill: Fill) -> None:
        self.quantity += fill.quantity
        self.quote_quantity += fill.quote_quantity
        self.fees[fill.fee_currency] = self.fees.get(fill.fee_currency, 0.0) + fill.fee
        self.time_ms = min(self.time_ms, fill.time_ms)
        self.fill_count += 1

    def freeze(self) -> MergedOrder:
        return MergedOrder(
            order_id=self.order_id,
            symbol=self.symbol,
            side=self.side,
            price=self.price,
            quantity=self.quantity,
            quote_quantity=self.quote_quantity,
            fees=dict(self.fees),
            time_ms=self.time_ms,
            fill_count=self.fill_count,
        )


def _start(fill: Fill) -> _Accumulator:
    acc = _Accumulator(
        order_id=fill.order_id,
        symbol=fill.symbol,
        side=fill.side,
        price=fill.price,
        time_ms=fill.time_ms,
    )
    acc.add(fill)
    return acc


def merge_fills(fills: Iterable[Fill]) -> list[MergedOrder]:
    """
    Merge consecutive fills sharing order id, side and price.

    Fills are sorted by time first (stable, so equal timestamps keep input
    order). Same order id at a different price level starts a new record.
    Fees are summed per fee currency.
    """
    ordered = sorted(fills, key=lambda f: f.time_ms)
    out: list[MergedOrder] = []
    current: _Accumulator | None = None
    for fill in ordered:
        if current is not None and current.accepts(fill):
            current.add(fill)
            continue
        if current is not None:
            out.append(current.freeze())
        current = _start(fill)
    if current is not None:
        out.append(current.freeze())
    return out
