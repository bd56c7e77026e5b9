"""Dashboard package."""

from .blueprint import (
    build_dashboard_payload,
    holdings_frame,
    pairs_frame,
    rounds_frame,
    trades_frame,
)

__all__ = [
    "build_dashboard_payload",
    "holdings_frame",
    "pairs_frame",
    "rounds_frame",
    "trades_frame",
]
