"""FIFO lot matching of merged orders into realized/unrealized P&L rounds."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import logging
from typing import Sequence

from daily_pnl_dashboard.time_utils import now_ms as _now_ms
from daily_pnl_dashboard.types import MatchRound, MergedOrder, OpenLot, RoundKind, Side, TradeLogEntry

from .fees import FeeValuer
from .numeric import safe_percent

logger = logging.getLogger(__name__)

QUANTITY_EPSILON = 1e-6


@dataclass(slots=True)
class MatchResult:
    rounds: list[MatchRound] = field(default_factory=list)
    total_realized_pnl: float = 0.0
    total_unrealized_pnl: float = 0.0
    total_fees: float = 0.0
    unmatched_sell_quantity: float = 0.0
    # net realized P&L per sell, keyed by position in the matched order list
    realized_by_order: dict[int, float] = field(default_factory=dict)

    @property
    def total_pnl(self) -> float:
        return self.total_realized_pnl + self.total_unrealized_pnl

    def closed_rounds(self) -> list[MatchRound]:
        return [r for r in self.rounds if r.kind == RoundKind.CLOSED]

    def open_rounds(self) -> list[MatchRound]:
        return [r for r in self.rounds if r.kind == RoundKind.OPEN]


def _closed_round(lot: OpenLot, sell: MergedOrder, qty: float, buy_fee: float, sell_fee: float) -> MatchRound:
    cost_basis = lot.price * qty
    gross = (sell.price - lot.price) * qty
    net = gross - buy_fee - sell_fee
    return MatchRound(
        kind=RoundKind.CLOSED,
        buy_price=lot.price,
        sell_price=sell.price,
        mark_price=None,
        quantity=qty,
        gross_pnl=gross,
        buy_fee=buy_fee,
        sell_fee=sell_fee,
        net_pnl=net,
        pnl_percent=safe_percent(sell.price - lot.price, lot.price),
        net_pnl_percent=safe_percent(net, cost_basis),
        fee_percent=safe_percent(buy_fee + sell_fee, cost_basis),
        buy_time_ms=lot.time_ms,
        sell_time_ms=sell.time_ms,
        hold_time_ms=sell.time_ms - lot.time_ms,
        buy_order_id=lot.order_id,
        sell_order_id=sell.order_id,
    )


def _open_round(lot: OpenLot, mark_price: float, now: int) -> MatchRound:
    qty = lot.remaining_quantity
    cost_basis = lot.price * qty
    fee = lot.fee_value * (qty / lot.original_quantity) if lot.original_quantity else 0.0
    gross = (mark_price - lot.price) * qty
    net = gross - fee
    return MatchRound(
        kind=RoundKind.OPEN,
        buy_price=lot.price,
        sell_price=None,
        mark_price=mark_price,
        quantity=qty,
        gross_pnl=gross,
        buy_fee=fee,
        sell_fee=0.0,
        net_pnl=net,
        pnl_percent=safe_percent(mark_price - lot.price, lot.price),
        net_pnl_percent=safe_percent(net, cost_basis),
        fee_percent=safe_percent(fee, cost_basis),
        buy_time_ms=lot.time_ms,
        sell_time_ms=None,
        hold_time_ms=now - lot.time_ms,
        buy_order_id=lot.order_id,
    )


def match_orders(
    orders: Sequence[MergedOrder],
    mark_price: float,
    fee_valuer: FeeValuer,
    now_ms: int | None = None,
    epsilon: float = QUANTITY_EPSILON,
) -> MatchResult:
    """
    Pair sell quantity against the oldest open buy quantity.

    `orders` must be time-ordered (as produced by `merge_fills`). Each order's
    fee is valued once and pro-rated over the quantity it contributes to a
    round. Fees charged in the traded asset are valued at `mark_price`, so
    with no mark available (0.0) they are worth nothing. Sell quantity beyond
    all open lots is dropped from P&L and only counted in
    `unmatched_sell_quantity`.
    """
    now = _now_ms() if now_ms is None else int(now_ms)
    result = MatchResult()
    queue: deque[OpenLot] = deque()

    for index, order in enumerate(orders):
        fee_value = fee_valuer.value_fees(order.fees, mark_price)
        if order.side == Side.BUY:
            queue.append(
                OpenLot(
                    order_id=order.order_id,
                    original_quantity=order.quantity,
                    remaining_quantity=order.quantity,
                    price=order.price,
                    fee_value=fee_value,
                    time_ms=order.time_ms,
                )
            )
            continue

        remaining_sell = order.quantity
        while remaining_sell > epsilon and queue:
            head = queue[0]
            qty = min(remaining_sell, head.remaining_quantity)
            buy_fee = head.fee_value * (qty / head.original_quantity) if head.original_quantity else 0.0
            sell_fee = fee_value * (qty / order.quantity) if order.quantity else 0.0
            match = _closed_round(head, order, qty, buy_fee, sell_fee)
            result.rounds.append(match)
            result.total_realized_pnl += match.net_pnl
            result.realized_by_order[index] = result.realized_by_order.get(index, 0.0) + match.net_pnl
            result.total_fees += match.total_fee
            head.remaining_quantity -= qty
            remaining_sell -= qty
            if head.remaining_quantity <= epsilon:
                queue.popleft()
        if remaining_sell > epsilon:
            result.unmatched_sell_quantity += remaining_sell
            logger.debug(
                "%s sell order %s exceeds open lots by %.8f",
                order.symbol,
                order.order_id,
                remaining_sell,
            )

    for lot in queue:
        if lot.remaining_quantity <= epsilon:
            continue
        leftover = _open_round(lot, mark_price, now)
        result.rounds.append(leftover)
        result.total_unrealized_pnl += leftover.net_pnl
        result.total_fees += leftover.total_fee
    return result


def build_trade_log(
    orders: Sequence[MergedOrder],
    result: MatchResult,
    fee_valuer: FeeValuer,
    mark_price: float,
) -> list[TradeLogEntry]:
    """Attach fee valuation and per-sell realized P&L to each merged order.

    `result` must come from `match_orders` over the same `orders` sequence.
    """
    entries: list[TradeLogEntry] = []
    for index, order in enumerate(orders):
        fee_value = fee_valuer.value_fees(order.fees, mark_price)
        entries.append(
            TradeLogEntry(
                order=order,
                fee_value=fee_value,
                fee_percent=safe_percent(fee_value, order.quote_quantity),
                realized_pnl=result.realized_by_order.get(index, 0.0),
            )
        )
    return entries
