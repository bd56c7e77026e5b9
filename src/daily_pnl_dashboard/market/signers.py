"""Binance-style query signing."""

from __future__ import annotations

from dataclasses import dataclass
import hashlib
import hmac
from typing import Any
import urllib.parse

from daily_pnl_dashboard.time_utils import now_ms


@dataclass(slots=True)
class BinanceSpotSigner:
    """HMAC-SHA256 query signing with timestamp nonce."""

    api_key: str
    api_secret: str
    recv_window_ms: int = 5000

    def sign(self, query: str) -> str:
        return hmac.new(self.api_secret.encode("utf-8"), query.encode("utf-8"), hashlib.sha256).hexdigest()

    def signed_query(self, params: dict[str, Any], timestamp_ms: int | None = None) -> str:
        """Return `params` url-encoded with timestamp, recvWindow and signature appended."""
        out = {k: v for k, v in params.items() if v is not None}
        out["recvWindow"] = self.recv_window_ms
        out["timestamp"] = timestamp_ms if timestamp_ms is not None else now_ms()
        query = urllib.parse.urlencode(list(out.items()))
        return f"{query}&signature={self.sign(query)}"

    def headers(self) -> dict[str, str]:
        return {"X-MBX-APIKEY": self.api_key}
