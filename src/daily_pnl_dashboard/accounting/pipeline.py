"""Per-pair reconciliation: normalize, merge, match, enrich, summarize."""

from __future__ import annotations

from typing import Any, Iterable

from daily_pnl_dashboard.types import PairReport, Ticker24h

from .aggregator import summarize_pair
from .fees import FeeValuer
from .fifo import QUANTITY_EPSILON, build_trade_log, match_orders
from .merger import merge_fills
from .normalizer import normalize_fills


def reconcile_pair(
    symbol: str,
    raw_fills: Iterable[dict[str, Any]],
    mark_price: float,
    fee_valuer: FeeValuer,
    asset: str | None = None,
    ticker: Ticker24h | None = None,
    now_ms: int | None = None,
    epsilon: float = QUANTITY_EPSILON,
) -> PairReport:
    fills = normalize_fills(raw_fills, symbol=symbol)
    orders = merge_fills(fills)
    result = match_orders(orders, mark_price=mark_price, fee_valuer=fee_valuer, now_ms=now_ms, epsilon=epsilon)
    return PairReport(
        symbol=symbol,
        asset=asset or symbol,
        current_price=mark_price,
        ticker=ticker or Ticker24h(),
        trades=build_trade_log(orders, result, fee_valuer, mark_price),
        rounds=result.rounds,
        summary=summarize_pair(symbol, orders, result),
        fill_count=len(fills),
    )
