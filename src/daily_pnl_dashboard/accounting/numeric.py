"""Tolerant numeric parsing and zero-safe division."""

from __future__ import annotations

import math
from typing import Any


def parse_decimal(value: Any, default: float = 0.0) -> float:
    """Parse a textual or numeric decimal, returning `default` when unusable."""
    if value is None or isinstance(value, bool):
        return default
    try:
        out = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(out):
        return default
    return out


def parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "y"}
    return bool(value)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, yielding 0.0 instead of inf/NaN for zero or non-finite inputs."""
    if denominator == 0 or not math.isfinite(denominator):
        return 0.0
    out = numerator / denominator
    return out if math.isfinite(out) else 0.0


def safe_percent(numerator: float, denominator: float) -> float:
    return safe_ratio(numerator, denominator) * 100.0
