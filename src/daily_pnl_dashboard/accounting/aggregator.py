"""Per-pair and portfolio-wide P&L summaries."""

from __future__ import annotations

from typing import Iterable, Sequence

from daily_pnl_dashboard.types import MergedOrder, PairReport, PairSummary, PortfolioSummary, Side

from .fifo import MatchResult
from .numeric import safe_percent


def summarize_pair(symbol: str, orders: Sequence[MergedOrder], result: MatchResult) -> PairSummary:
    return PairSummary(
        symbol=symbol,
        total_realized_pnl=result.total_realized_pnl,
        total_unrealized_pnl=result.total_unrealized_pnl,
        total_fees=result.total_fees,
        buy_count=sum(1 for o in orders if o.side == Side.BUY),
        sell_count=sum(1 for o in orders if o.side == Side.SELL),
        unmatched_sell_quantity=result.unmatched_sell_quantity,
    )


def summarize_portfolio(reports: Iterable[PairReport]) -> PortfolioSummary:
    """Sum pair reports; pairs without rounds contribute zero P&L."""
    summary = PortfolioSummary()
    for report in reports:
        summary.pair_count += 1
        summary.realized_pnl += report.summary.total_realized_pnl
        summary.unrealized_pnl += report.summary.total_unrealized_pnl
        summary.total_fees += report.summary.total_fees
        summary.total_trades += len(report.trades)
        summary.total_fills += report.fill_count
        summary.total_volume += report.volume
    summary.fee_percent = safe_percent(summary.total_fees, summary.total_volume)
    return summary
