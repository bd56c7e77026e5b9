"""Fee valuation in the common reporting currency."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(slots=True, frozen=True)
class FeeValuer:
    """
    Convert fees charged in arbitrary assets into the valuation currency.

    `discount_price` is the discount token's price in the valuation currency,
    fetched once per refresh cycle so every fee in a pass uses one snapshot.
    Fees in any other asset are assumed to be charged in the traded asset and
    are valued at `asset_price`, which callers set to the pair's current price.
    """

    valuation_currency: str = "USDT"
    discount_currency: str = "BNB"
    discount_price: float = 0.0

    def value(self, amount: float, currency: str | None, asset_price: float) -> float:
        if not amount:
            return 0.0
        code = (currency or "").upper()
        if code == self.valuation_currency:
            return amount
        if code == self.discount_currency:
            return amount * self.discount_price
        return amount * asset_price

    def value_fees(self, fees: Mapping[str, float], asset_price: float) -> float:
        return sum(self.value(amount, currency, asset_price) for currency, amount in fees.items())
