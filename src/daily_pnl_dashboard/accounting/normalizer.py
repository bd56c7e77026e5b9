"""Convert raw exchange trade rows into numeric `Fill` records."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from daily_pnl_dashboard.types import Fill, Side

from .numeric import parse_decimal, parse_flag

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = ("price", "qty", "quoteQty", "commission")


def _field(raw: dict[str, Any], key: str, fill_id: str) -> float:
    value = raw.get(key)
    out = parse_decimal(value, default=-1.0)
    if out < 0:
        logger.debug("fill %s: unusable %s=%r treated as 0", fill_id, key, value)
        return 0.0
    return out


def normalize_fill(raw: dict[str, Any], symbol: str | None = None) -> Fill:
    """
    Normalize one Binance `myTrades`-shaped row.

    Unparseable numeric fields degrade to 0.0 instead of raising.
    """
    fill_id = str(raw.get("id", ""))
    values = {key: _field(raw, key, fill_id) for key in _NUMERIC_FIELDS}
    return Fill(
        fill_id=fill_id,
        order_id=str(raw.get("orderId", "")),
        symbol=str(raw.get("symbol") or symbol or ""),
        side=Side.BUY if parse_flag(raw.get("isBuyer")) else Side.SELL,
        price=values["price"],
        quantity=values["qty"],
        quote_quantity=values["quoteQty"],
        fee=values["commission"],
        fee_currency=str(raw.get("commissionAsset") or "").upper(),
        is_maker=parse_flag(raw.get("isMaker")),
        time_ms=int(parse_decimal(raw.get("time"))),
    )


def normalize_fills(rows: Iterable[dict[str, Any]], symbol: str | None = None) -> list[Fill]:
    return [normalize_fill(row, symbol=symbol) for row in rows]
