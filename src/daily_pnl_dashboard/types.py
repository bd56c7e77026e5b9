"""Core domain datatypes for fill reconciliation and P&L."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class Side(StrEnum):
    BUY = "BUY"
    SELL = "SELL"


class RoundKind(StrEnum):
    CLOSED = "closed"
    OPEN = "open"


@dataclass(slots=True, frozen=True)
class Fill:
    """One execution record, normalized to numeric fields."""

    fill_id: str
    order_id: str
    symbol: str
    side: Side
    price: float
    quantity: float
    quote_quantity: float
    fee: float
    fee_currency: str
    is_maker: bool
    time_ms: int


@dataclass(slots=True, frozen=True)
class MergedOrder:
    """Same-order, same-side, same-price fills collapsed into one record."""

    order_id: str
    symbol: str
    side: Side
    price: float
    quantity: float
    quote_quantity: float
    fees: dict[str, float]
    time_ms: int
    fill_count: int = 1

    @property
    def fee_currency(self) -> str | None:
        if len(self.fees) == 1:
            return next(iter(self.fees))
        return None

    @property
    def fee(self) -> float | None:
        """Fee amount in `fee_currency`; None when several currencies were charged."""
        if self.fee_currency is None:
            return None if self.fees else 0.0
        return self.fees[self.fee_currency]

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["side"] = str(self.side)
        return out


@dataclass(slots=True)
class OpenLot:
    """Unconsumed portion of a buy order during one matching pass."""

    order_id: str
    original_quantity: float
    remaining_quantity: float
    price: float
    fee_value: float
    time_ms: int


@dataclass(slots=True, frozen=True)
class MatchRound:
    """Closed buy/sell match or open remainder marked to the current price."""

    kind: RoundKind
    buy_price: float
    sell_price: float | None
    mark_price: float | None
    quantity: float
    gross_pnl: float
    buy_fee: float
    sell_fee: float
    net_pnl: float
    pnl_percent: float
    net_pnl_percent: float
    fee_percent: float
    buy_time_ms: int
    sell_time_ms: int | None
    hold_time_ms: int
    buy_order_id: str
    sell_order_id: str | None = None

    @property
    def total_fee(self) -> float:
        return self.buy_fee + self.sell_fee

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["kind"] = str(self.kind)
        out["total_fee"] = self.total_fee
        return out


@dataclass(slots=True, frozen=True)
class TradeLogEntry:
    """Merged order enriched with fee valuation and realized P&L."""

    order: MergedOrder
    fee_value: float
    fee_percent: float
    realized_pnl: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.order.to_dict(),
            "fee_value": self.fee_value,
            "fee_percent": self.fee_percent,
            "realized_pnl": self.realized_pnl,
        }


@dataclass(slots=True, frozen=True)
class Ticker24h:
    price_change_percent: float = 0.0
    high_price: float = 0.0
    low_price: float = 0.0
    volume: float = 0.0
    quote_volume: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class AccountBalance:
    asset: str
    free: float
    locked: float

    @property
    def total(self) -> float:
        return self.free + self.locked


@dataclass(slots=True)
class PairSummary:
    symbol: str
    total_realized_pnl: float = 0.0
    total_unrealized_pnl: float = 0.0
    total_fees: float = 0.0
    buy_count: int = 0
    sell_count: int = 0
    unmatched_sell_quantity: float = 0.0

    @property
    def total_pnl(self) -> float:
        return self.total_realized_pnl + self.total_unrealized_pnl

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["total_pnl"] = self.total_pnl
        return out


@dataclass(slots=True)
class PairReport:
    """Everything the presentation layer shows for one active pair."""

    symbol: str
    asset: str
    current_price: float
    ticker: Ticker24h
    trades: list[TradeLogEntry]
    rounds: list[MatchRound]
    summary: PairSummary
    fill_count: int = 0

    @property
    def volume(self) -> float:
        return sum(entry.order.quote_quantity for entry in self.trades)

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "asset": self.asset,
            "current_price": self.current_price,
            "ticker": self.ticker.to_dict(),
            "trades": [entry.to_dict() for entry in self.trades],
            "rounds": [r.to_dict() for r in self.rounds],
            "pnl": self.summary.to_dict(),
            "fill_count": self.fill_count,
        }


@dataclass(slots=True)
class PortfolioSummary:
    total_trades: int = 0
    total_fills: int = 0
    total_volume: float = 0.0
    realized_pnl: float = 0.0
    unrealized_pnl: float = 0.0
    total_fees: float = 0.0
    fee_percent: float = 0.0
    pair_count: int = 0

    @property
    def total_pnl(self) -> float:
        return self.realized_pnl + self.unrealized_pnl

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["total_pnl"] = self.total_pnl
        return out
