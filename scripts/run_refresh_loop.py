"""Run dashboard refresh cycles (single cycle or bounded loop) and print JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from daily_pnl_dashboard import DashboardConfig, load_config
from daily_pnl_dashboard.live import AlertRouter
from daily_pnl_dashboard.market import BinanceRestProvider
from daily_pnl_dashboard.orchestration import RefreshCoordinator, RefreshLoop, RefreshLoopConfig


def _load(path: str | None) -> DashboardConfig:
    if path and Path(path).exists():
        return load_config(path)
    return DashboardConfig()


async def _run(args: argparse.Namespace) -> None:
    config = _load(args.config)
    cooldown = config.alert_cooldown_seconds
    if args.alerts_file:
        router = AlertRouter.with_console_and_file(args.alerts_file, repeat_cooldown_seconds=cooldown)
    else:
        router = AlertRouter.console_only(repeat_cooldown_seconds=cooldown)
    async with BinanceRestProvider(config.provider) as provider:
        coordinator = RefreshCoordinator(provider=provider, config=config, alert_router=router)
        loop = RefreshLoop(
            coordinator,
            RefreshLoopConfig(
                refresh_seconds=float(args.refresh_seconds or config.refresh_seconds),
                max_cycles=max(args.max_cycles, 1),
                stop_on_exception=True,
            ),
        )
        if args.once:
            report = await loop.run_once()
            print(json.dumps(report.to_dict() if args.full else report.summary.to_dict(), indent=2, default=str))
            return
        await loop.run_forever()
        latest = coordinator.board.latest
        if latest is not None:
            print(json.dumps(latest.summary.to_dict(), indent=2, default=str))


def main() -> None:
    parser = argparse.ArgumentParser(description="Run daily P&L refresh cycles.")
    parser.add_argument("--config", default="configs/dashboard.yaml")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit.")
    parser.add_argument("--full", action="store_true", help="Print the full report, not just the summary.")
    parser.add_argument("--max-cycles", type=int, default=3, help="Max cycles for loop mode.")
    parser.add_argument("--refresh-seconds", type=float, default=None)
    parser.add_argument("--alerts-file", default=None, help="Append alerts as JSONL to this path.")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
