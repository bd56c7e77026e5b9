"""Account balance valuation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from daily_pnl_dashboard.types import AccountBalance


@dataclass(slots=True, frozen=True)
class HoldingValue:
    asset: str
    balance: float
    price: float
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"asset": self.asset, "balance": self.balance, "price": self.price, "value": self.value}


@dataclass(slots=True)
class HoldingsValuation:
    holdings: list[HoldingValue] = field(default_factory=list)
    total_value: float = 0.0
    prices: dict[str, float] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "holdings": [h.to_dict() for h in self.holdings],
            "total_value": self.total_value,
            "prices": self.prices,
            "error": self.error,
        }


def value_holdings(
    balances: Iterable[AccountBalance],
    prices: Mapping[str, float],
    valuation_currency: str = "USDT",
) -> HoldingsValuation:
    """
    Value non-zero balances in the valuation currency.

    `prices` maps asset code to price in the valuation currency. The
    valuation currency itself is worth 1.0; unpriced assets are worth 0.0.
    """
    holdings: list[HoldingValue] = []
    total = 0.0
    for balance in balances:
        if balance.free <= 0 and balance.locked <= 0:
            continue
        price = prices.get(balance.asset)
        if price is None:
            price = 1.0 if balance.asset == valuation_currency else 0.0
        value = balance.total * price
        total += value
        holdings.append(HoldingValue(asset=balance.asset, balance=balance.total, price=price, value=value))
    return HoldingsValuation(holdings=holdings, total_value=total, prices=dict(prices))


def failed_holdings(error: str) -> HoldingsValuation:
    return HoldingsValuation(error=error)
