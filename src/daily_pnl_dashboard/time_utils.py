"""Epoch-millisecond and UTC day helpers."""

from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def utc_day_start_ms(at_ms: int | None = None) -> int:
    """Return midnight UTC of the day containing `at_ms` (default: now)."""
    ts = pd.Timestamp(at_ms if at_ms is not None else now_ms(), unit="ms", tz="UTC")
    return int(ts.floor("D").timestamp() * 1000)


def ms_to_utc_timestamp(value: int | float) -> pd.Timestamp:
    return pd.Timestamp(int(value), unit="ms", tz="UTC")


def utc_date_label(at_ms: int) -> str:
    return ms_to_utc_timestamp(at_ms).strftime("%Y-%m-%d")
