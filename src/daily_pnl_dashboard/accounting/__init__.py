"""Fill reconciliation and P&L accounting."""

from .aggregator import summarize_pair, summarize_portfolio
from .fees import FeeValuer
from .fifo import QUANTITY_EPSILON, MatchResult, build_trade_log, match_orders
from .holdings import HoldingValue, HoldingsValuation, failed_holdings, value_holdings
from .merger import merge_fills
from .normalizer import normalize_fill, normalize_fills
from .numeric import parse_decimal, parse_flag, safe_percent, safe_ratio
from .pipeline import reconcile_pair

__all__ = [
    "FeeValuer",
    "HoldingValue",
    "HoldingsValuation",
    "MatchResult",
    "QUANTITY_EPSILON",
    "build_trade_log",
    "failed_holdings",
    "match_orders",
    "merge_fills",
    "normalize_fill",
    "normalize_fills",
    "parse_decimal",
    "parse_flag",
    "reconcile_pair",
    "safe_percent",
    "safe_ratio",
    "summarize_pair",
    "summarize_portfolio",
    "value_holdings",
]
