"""Launch the live-refreshing Streamlit P&L dashboard."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pandas as pd
import streamlit as st

from daily_pnl_dashboard import DashboardConfig, load_config
from daily_pnl_dashboard.dashboard import build_dashboard_payload
from daily_pnl_dashboard.live import AlertRouter
from daily_pnl_dashboard.market import BinanceRestProvider
from daily_pnl_dashboard.orchestration import CycleReport, RefreshCoordinator, ReportBoard


def _load_config(path: str) -> DashboardConfig:
    if Path(path).exists():
        return load_config(path)
    return DashboardConfig()


async def _refresh(config: DashboardConfig, coordinator_state: dict) -> CycleReport:
    async with BinanceRestProvider(config.provider) as provider:
        coordinator = RefreshCoordinator(
            provider=provider,
            config=config,
            board=coordinator_state["board"],
            alert_router=coordinator_state["alerts"],
            sequence_start=coordinator_state["sequence"],
        )
        report = await coordinator.run_cycle()
        coordinator_state["sequence"] = coordinator.sequence
        return report


def _render_table(title: str, frame: pd.DataFrame, empty_message: str) -> None:
    st.subheader(title)
    if frame.empty:
        st.info(empty_message)
        return
    st.dataframe(frame, use_container_width=True)


def _render_figure(fig) -> None:
    if hasattr(fig, "to_dict"):
        st.plotly_chart(fig, use_container_width=True)


def main() -> None:
    st.set_page_config(layout="wide", page_title="Daily P&L Dashboard")
    config_path = st.sidebar.text_input("Config path", "configs/dashboard.yaml")
    config = _load_config(config_path)
    refresh_seconds = st.sidebar.slider("Auto refresh (sec)", 5, 120, int(config.refresh_seconds))
    try:
        from streamlit_autorefresh import st_autorefresh  # type: ignore

        st_autorefresh(interval=refresh_seconds * 1000, key="pnl-refresh")
    except Exception:
        if st.sidebar.button("Refresh now"):
            st.rerun()

    state = st.session_state.setdefault(
        "coordinator_state",
        {
            "board": ReportBoard(),
            "sequence": 0,
            "alerts": AlertRouter.console_only(repeat_cooldown_seconds=config.alert_cooldown_seconds),
        },
    )
    asyncio.run(_refresh(config, state))
    report = state["board"].latest
    if report is None:
        st.warning("No refresh cycle has completed yet.")
        return
    payload = build_dashboard_payload(report)
    summary = payload["summary_metrics"]

    st.title("Daily Trading P&L")
    if payload["holdings"]["error"]:
        st.error(f"Account unavailable: {payload['holdings']['error']}")
    c1, c2, c3, c4, c5, c6 = st.columns(6)
    c1.metric("Portfolio Value", f"{payload['holdings']['total_value']:,.2f}")
    c2.metric("Realized P&L", f"{summary['realized_pnl']:,.2f}")
    c3.metric("Unrealized P&L", f"{summary['unrealized_pnl']:,.2f}")
    c4.metric("Total P&L", f"{summary['total_pnl']:,.2f}")
    c5.metric("Fees", f"{summary['total_fees']:,.2f}", f"{summary['fee_percent']:.3f}% of volume")
    c6.metric("Trades", summary["total_trades"], f"{summary['total_volume']:,.0f} volume")
    st.caption(f"Cycle #{report.sequence} - {report.to_dict()['last_updated']}")

    _render_figure(payload["pnl_by_pair"])
    _render_figure(payload["cumulative_realized"])
    _render_table("Pairs", payload["pairs_table"], "No trades today.")
    _render_table("Rounds", payload["rounds_table"], "No matched rounds.")
    _render_table("Trades", payload["trades_table"], "No trades today.")
    _render_table("Holdings", payload["holdings_table"], "No balances.")
    _render_figure(payload["fee_breakdown"])


if __name__ == "__main__":
    main()
