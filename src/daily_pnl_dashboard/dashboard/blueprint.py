"""Dashboard tables and panel builders for a refresh cycle report."""

from __future__ import annotations

from typing import Any

import pandas as pd

from daily_pnl_dashboard.orchestration.refresh_cycle import CycleReport

try:
    import plotly.express as px
    import plotly.graph_objects as go

    PLOTLY_AVAILABLE = True
except Exception:  # pragma: no cover - optional dependency
    PLOTLY_AVAILABLE = False

ROUND_COLUMNS = [
    "symbol", "kind", "quantity", "buy_price", "sell_price", "mark_price", "gross_pnl",
    "buy_fee", "sell_fee", "total_fee", "net_pnl", "net_pnl_percent", "buy_time", "sell_time", "hold_minutes",
]
TRADE_COLUMNS = [
    "symbol", "time", "side", "price", "quantity", "quote_quantity", "fill_count",
    "fees", "fee_value", "fee_percent", "realized_pnl",
]


def _ms_column(frame: pd.DataFrame, column: str) -> pd.Series:
    return pd.to_datetime(frame[column], unit="ms", utc=True, errors="coerce")


def rounds_frame(report: CycleReport) -> pd.DataFrame:
    rows = [{"symbol": pair.symbol, **r.to_dict()} for pair in report.pairs for r in pair.rounds]
    if not rows:
        return pd.DataFrame(columns=ROUND_COLUMNS)
    frame = pd.DataFrame(rows)
    frame["buy_time"] = _ms_column(frame, "buy_time_ms")
    frame["sell_time"] = _ms_column(frame, "sell_time_ms")
    frame["hold_minutes"] = frame["hold_time_ms"] / 60_000.0
    return frame[ROUND_COLUMNS]


def trades_frame(report: CycleReport) -> pd.DataFrame:
    rows = [entry.to_dict() for pair in report.pairs for entry in pair.trades]
    if not rows:
        return pd.DataFrame(columns=TRADE_COLUMNS)
    frame = pd.DataFrame(rows)
    frame["time"] = _ms_column(frame, "time_ms")
    frame["fees"] = frame["fees"].map(lambda fees: ", ".join(f"{v:g} {k}" for k, v in fees.items()))
    return frame[TRADE_COLUMNS].sort_values("time", ascending=False, ignore_index=True)


def pairs_frame(report: CycleReport) -> pd.DataFrame:
    rows = [
        {
            "symbol": pair.symbol,
            "asset": pair.asset,
            "current_price": pair.current_price,
            "change_24h_pct": pair.ticker.price_change_percent,
            "trades": len(pair.trades),
            "volume": pair.volume,
            **pair.summary.to_dict(),
        }
        for pair in report.pairs
    ]
    frame = pd.DataFrame(rows)
    if frame.empty:
        return frame
    return frame.sort_values("total_pnl", ascending=False, ignore_index=True)


def holdings_frame(report: CycleReport) -> pd.DataFrame:
    frame = pd.DataFrame([h.to_dict() for h in report.holdings.holdings])
    if frame.empty:
        return frame
    return frame.sort_values("value", ascending=False, ignore_index=True)


def _empty_fig() -> dict[str, Any]:
    return {"type": "empty", "message": "Install plotly for interactive charts."}


def pnl_by_pair_panel(report: CycleReport) -> Any:
    pairs = pairs_frame(report)
    if not PLOTLY_AVAILABLE or pairs.empty:
        return _empty_fig()
    fig = go.Figure()
    fig.add_trace(go.Bar(x=pairs["symbol"], y=pairs["total_realized_pnl"], name="Realized"))
    fig.add_trace(go.Bar(x=pairs["symbol"], y=pairs["total_unrealized_pnl"], name="Unrealized"))
    fig.update_layout(title="Net P&L by Pair", barmode="relative", template="plotly_white")
    return fig


def cumulative_realized_panel(report: CycleReport) -> Any:
    rounds = rounds_frame(report)
    closed = rounds.loc[rounds["kind"] == "closed"] if not rounds.empty else rounds
    if not PLOTLY_AVAILABLE or closed.empty:
        return _empty_fig()
    closed = closed.sort_values("sell_time").copy()
    closed["cumulative_net_pnl"] = closed["net_pnl"].cumsum()
    fig = px.line(closed, x="sell_time", y="cumulative_net_pnl", markers=True, title="Cumulative Realized P&L")
    fig.update_layout(template="plotly_white")
    return fig


def fee_breakdown_panel(report: CycleReport) -> Any:
    pairs = pairs_frame(report)
    if not PLOTLY_AVAILABLE or pairs.empty or float(pairs["total_fees"].sum()) <= 0:
        return _empty_fig()
    fig = px.pie(pairs, names="symbol", values="total_fees", title="Fees by Pair")
    fig.update_layout(template="plotly_white")
    return fig


def build_dashboard_payload(report: CycleReport) -> dict[str, Any]:
    """Build all dashboard modules for one cycle report."""
    return {
        "sequence": report.sequence,
        "summary_metrics": report.summary.to_dict(),
        "holdings": report.holdings.to_dict(),
        "holdings_table": holdings_frame(report),
        "pairs_table": pairs_frame(report),
        "rounds_table": rounds_frame(report),
        "trades_table": trades_frame(report),
        "pnl_by_pair": pnl_by_pair_panel(report),
        "cumulative_realized": cumulative_realized_panel(report),
        "fee_breakdown": fee_breakdown_panel(report),
        "failed_pairs": list(report.failed_symbols),
    }
