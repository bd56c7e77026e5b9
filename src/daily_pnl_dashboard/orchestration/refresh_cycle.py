"""Two-phase refresh cycle: concurrent collection, then pure reconciliation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Awaitable, Callable, TypeVar

from daily_pnl_dashboard.accounting import (
    FeeValuer,
    HoldingsValuation,
    failed_holdings,
    reconcile_pair,
    summarize_portfolio,
    value_holdings,
)
from daily_pnl_dashboard.config import DashboardConfig
from daily_pnl_dashboard.live.alerting import AlertRouter
from daily_pnl_dashboard.market import MarketDataProvider
from daily_pnl_dashboard.time_utils import now_ms, utc_date_label, utc_day_start_ms
from daily_pnl_dashboard.types import AccountBalance, PairReport, PortfolioSummary, Ticker24h

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class CycleSnapshot:
    """Everything fetched for one cycle; never mutated after collection."""

    sequence: int
    started_at_ms: int
    window_start_ms: int
    fills_by_symbol: dict[str, tuple[dict[str, Any], ...]]
    prices: dict[str, float]
    tickers: dict[str, Ticker24h]
    discount_price: float
    balances: tuple[AccountBalance, ...] | None = None
    asset_prices: dict[str, float] = field(default_factory=dict)
    account_error: str | None = None
    failed_symbols: tuple[str, ...] = ()


@dataclass(slots=True)
class CycleReport:
    sequence: int
    window_start_ms: int
    generated_at_ms: int
    pairs: list[PairReport]
    summary: PortfolioSummary
    holdings: HoldingsValuation
    failed_symbols: list[str] = field(default_factory=list)

    def pair(self, symbol: str) -> PairReport | None:
        return next((p for p in self.pairs if p.symbol == symbol), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "date": utc_date_label(self.generated_at_ms),
            "window_start_ms": self.window_start_ms,
            "pairs": [p.to_dict() for p in self.pairs],
            "summary": self.summary.to_dict(),
            "holdings": self.holdings.to_dict(),
            "failed_pairs": list(self.failed_symbols),
            "last_updated": datetime.fromtimestamp(self.generated_at_ms / 1000.0, tz=timezone.utc).isoformat(),
        }


def compute_report(
    snapshot: CycleSnapshot,
    config: DashboardConfig,
    now_ms: int | None = None,
) -> CycleReport:
    """Reconcile every active pair of a snapshot. Pure and synchronous."""
    now = snapshot.started_at_ms if now_ms is None else int(now_ms)
    valuer = FeeValuer(
        valuation_currency=config.valuation_currency,
        discount_currency=config.discount_currency,
        discount_price=snapshot.discount_price,
    )
    pairs = [
        reconcile_pair(
            symbol,
            rows,
            mark_price=snapshot.prices.get(symbol, 0.0),
            fee_valuer=valuer,
            asset=config.asset_of(symbol),
            ticker=snapshot.tickers.get(symbol),
            now_ms=now,
            epsilon=config.quantity_epsilon,
        )
        for symbol, rows in snapshot.fills_by_symbol.items()
    ]
    if snapshot.balances is None:
        holdings = failed_holdings(snapshot.account_error or "account unavailable")
    else:
        holdings = value_holdings(snapshot.balances, snapshot.asset_prices, config.valuation_currency)
    return CycleReport(
        sequence=snapshot.sequence,
        window_start_ms=snapshot.window_start_ms,
        generated_at_ms=now,
        pairs=pairs,
        summary=summarize_portfolio(pairs),
        holdings=holdings,
        failed_symbols=list(snapshot.failed_symbols),
    )


class ReportBoard:
    """Holds the newest report; completions of older cycles are discarded."""

    def __init__(self) -> None:
        self._latest: CycleReport | None = None

    @property
    def latest(self) -> CycleReport | None:
        return self._latest

    def publish(self, report: CycleReport) -> bool:
        if self._latest is not None and report.sequence <= self._latest.sequence:
            logger.debug("discarding stale report %s (showing %s)", report.sequence, self._latest.sequence)
            return False
        self._latest = report
        return True


class RefreshCoordinator:
    """Runs refresh cycles against one provider and publishes the results."""

    def __init__(
        self,
        provider: MarketDataProvider,
        config: DashboardConfig | None = None,
        board: ReportBoard | None = None,
        alert_router: AlertRouter | None = None,
        clock: Callable[[], int] = now_ms,
        sequence_start: int = 0,
    ) -> None:
        self.provider = provider
        self.config = config or DashboardConfig()
        self.board = board or ReportBoard()
        self.alert_router = alert_router or AlertRouter.console_only()
        self.clock = clock
        self._sequence = sequence_start

    @property
    def sequence(self) -> int:
        return self._sequence

    def next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    async def _or_default(self, call: Awaitable[T], default: T, what: str) -> T:
        try:
            return await call
        except Exception as exc:
            logger.warning("%s unavailable: %s", what, exc)
            return default

    async def _collect_account(self) -> tuple[tuple[AccountBalance, ...] | None, dict[str, float], str | None]:
        try:
            balances = tuple(await self.provider.fetch_balances())
        except Exception as exc:
            return None, {}, str(exc) or exc.__class__.__name__
        quote = self.config.valuation_currency
        symbols = [
            f"{b.asset}{quote}"
            for b in balances
            if b.asset != quote and (b.free > 0 or b.locked > 0)
        ]
        by_symbol = await self._or_default(self.provider.fetch_prices(symbols), {}, "holding prices")
        return balances, {self.config.asset_of(s): p for s, p in by_symbol.items()}, None

    async def _collect_market(self, symbol: str) -> tuple[float, Ticker24h]:
        price, ticker = await asyncio.gather(
            self._or_default(self.provider.fetch_price(symbol), 0.0, f"{symbol} price"),
            self._or_default(self.provider.fetch_ticker_24h(symbol), Ticker24h(), f"{symbol} ticker"),
        )
        return price, ticker

    async def collect_snapshot(self) -> CycleSnapshot:
        """Phase 1: fetch fills, balances and prices concurrently."""
        sequence = self.next_sequence()
        started = self.clock()
        window_start = utc_day_start_ms(started)
        symbols = list(self.config.tracked_pairs)

        fill_results, account, discount_price = await asyncio.gather(
            asyncio.gather(
                *(self.provider.fetch_fills(symbol, window_start) for symbol in symbols),
                return_exceptions=True,
            ),
            self._collect_account(),
            self._or_default(self.provider.fetch_price(self.config.discount_pair), 0.0, "discount price"),
        )
        fills: dict[str, tuple[dict[str, Any], ...]] = {}
        failed: list[str] = []
        for symbol, outcome in zip(symbols, fill_results):
            if isinstance(outcome, Exception):
                logger.warning("%s fills unavailable: %s", symbol, outcome)
                failed.append(symbol)
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome:
                fills[symbol] = tuple(outcome)

        if discount_price <= 0:
            discount_price = self.config.fallback_discount_price

        active = list(fills)
        market = await asyncio.gather(*(self._collect_market(symbol) for symbol in active))
        balances, asset_prices, account_error = account
        return CycleSnapshot(
            sequence=sequence,
            started_at_ms=started,
            window_start_ms=window_start,
            fills_by_symbol=fills,
            prices={symbol: price for symbol, (price, _) in zip(active, market)},
            tickers={symbol: ticker for symbol, (_, ticker) in zip(active, market)},
            discount_price=discount_price,
            balances=balances,
            asset_prices=asset_prices,
            account_error=account_error,
            failed_symbols=tuple(failed),
        )

    def _raise_alerts(self, snapshot: CycleSnapshot) -> None:
        previous = self.board.latest
        if snapshot.account_error is None and previous is not None and previous.holdings.error is not None:
            self.alert_router.reset("refresh_cycle")
            self.alert_router.info(
                source="refresh_cycle",
                message="account fetch recovered",
                details={"sequence": snapshot.sequence},
            )
        if snapshot.account_error is not None:
            self.alert_router.critical(
                source="refresh_cycle",
                message="account fetch failed",
                details={"sequence": snapshot.sequence, "error": snapshot.account_error},
            )
        if snapshot.failed_symbols:
            self.alert_router.warning(
                source="refresh_cycle",
                message="fill fetch failed for some pairs",
                details={"sequence": snapshot.sequence, "symbols": list(snapshot.failed_symbols)},
            )

    async def run_cycle(self) -> CycleReport:
        snapshot = await self.collect_snapshot()
        self._raise_alerts(snapshot)
        report = compute_report(snapshot, self.config, now_ms=self.clock())
        self.board.publish(report)
        return report
