"""Market data and account provider interface with a Binance REST implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
import json
import logging
from typing import Any, Callable
import urllib.parse

import httpx

from daily_pnl_dashboard.accounting.numeric import parse_decimal
from daily_pnl_dashboard.config import ProviderConfig
from daily_pnl_dashboard.types import AccountBalance, Ticker24h

from .signers import BinanceSpotSigner

logger = logging.getLogger(__name__)

# Key lacks permission / invalid signature: treated as "no trades visible".
NO_ACCESS_CODES = frozenset({-2015, -1022})


class ProviderError(Exception):
    """Raised when no configured endpoint produced a usable response."""


class MarketDataProvider(ABC):
    """Async source of balances, fills and prices for one exchange account."""

    @abstractmethod
    async def fetch_balances(self) -> list[AccountBalance]:
        """Return authenticated account balances."""

    @abstractmethod
    async def fetch_fills(self, symbol: str, start_time_ms: int) -> list[dict[str, Any]]:
        """Return raw fill rows for `symbol` since `start_time_ms`."""

    @abstractmethod
    async def fetch_price(self, symbol: str) -> float:
        """Return the latest trade price for `symbol`."""

    @abstractmethod
    async def fetch_ticker_24h(self, symbol: str) -> Ticker24h:
        """Return rolling 24-hour statistics for `symbol`."""

    async def fetch_prices(self, symbols: list[str]) -> dict[str, float]:
        """Return latest prices for several symbols; default issues one call each."""
        out: dict[str, float] = {}
        for symbol in symbols:
            out[symbol] = await self.fetch_price(symbol)
        return out

    async def aclose(self) -> None:
        return None


def _is_restricted(data: Any) -> bool:
    return isinstance(data, dict) and "restricted" in str(data.get("msg", "")).lower()


class BinanceRestProvider(MarketDataProvider):
    """
    Binance spot REST client trying each base URL in order.

    Alternate hosts work around regional blocks on individual endpoints; the
    first host returning an acceptable payload wins. No retries beyond that.
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        client: httpx.AsyncClient | None = None,
        signer: BinanceSpotSigner | None = None,
    ) -> None:
        self.config = config or ProviderConfig()
        if not self.config.base_urls:
            raise ValueError("ProviderConfig.base_urls must not be empty")
        self.client = client or httpx.AsyncClient(timeout=self.config.timeout_seconds)
        self._owns_client = client is None
        if signer is None:
            api_key, api_secret = self.config.credentials()
            if api_key and api_secret:
                signer = BinanceSpotSigner(
                    api_key=api_key,
                    api_secret=api_secret,
                    recv_window_ms=self.config.recv_window_ms,
                )
        self.signer = signer

    async def __aenter__(self) -> "BinanceRestProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def _url(self, base: str, path: str, params: dict[str, Any], signed: bool) -> str:
        if signed and self.signer is not None:
            query = self.signer.signed_query(params)
        else:
            query = urllib.parse.urlencode(list(params.items()))
        url = f"{base.rstrip('/')}{path}"
        return f"{url}?{query}" if query else url

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        signed: bool = False,
        accept: Callable[[Any], bool] | None = None,
    ) -> Any:
        if signed and self.signer is None:
            raise ProviderError(f"{path}: API credentials are not configured")
        headers = self.signer.headers() if signed and self.signer is not None else {}
        last_error: Any = None
        for base in self.config.base_urls:
            url = self._url(base, path, params or {}, signed)
            try:
                response = await self.client.get(url, headers=headers)
                data = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                last_error = exc
                logger.debug("%s via %s failed: %s", path, base, exc)
                continue
            if _is_restricted(data) or (accept is not None and not accept(data)):
                last_error = data
                logger.debug("%s via %s rejected: %s", path, base, data)
                continue
            return data
        raise ProviderError(f"{path}: all endpoints failed ({last_error})")

    async def fetch_balances(self) -> list[AccountBalance]:
        data = await self._get(
            "/api/v3/account",
            signed=True,
            accept=lambda d: isinstance(d, dict) and isinstance(d.get("balances"), list),
        )
        return [
            AccountBalance(
                asset=str(row.get("asset", "")),
                free=parse_decimal(row.get("free")),
                locked=parse_decimal(row.get("locked")),
            )
            for row in data["balances"]
        ]

    async def fetch_fills(self, symbol: str, start_time_ms: int) -> list[dict[str, Any]]:
        data = await self._get(
            "/api/v3/myTrades",
            {"symbol": symbol, "startTime": int(start_time_ms)},
            signed=True,
            accept=lambda d: isinstance(d, list) or (isinstance(d, dict) and d.get("code") in NO_ACCESS_CODES),
        )
        if isinstance(data, list):
            return [row for row in data if isinstance(row, dict)]
        logger.info("%s: trade history not accessible (code %s)", symbol, data.get("code"))
        return []

    async def fetch_price(self, symbol: str) -> float:
        data = await self._get(
            "/api/v3/ticker/price",
            {"symbol": symbol},
            accept=lambda d: isinstance(d, dict) and d.get("price") is not None,
        )
        return parse_decimal(data["price"])

    async def fetch_prices(self, symbols: list[str]) -> dict[str, float]:
        if not symbols:
            return {}
        data = await self._get(
            "/api/v3/ticker/price",
            {"symbols": json.dumps(symbols, separators=(",", ":"))},
            accept=lambda d: isinstance(d, list),
        )
        return {
            str(row.get("symbol", "")): parse_decimal(row.get("price"))
            for row in data
            if isinstance(row, dict)
        }

    async def fetch_ticker_24h(self, symbol: str) -> Ticker24h:
        data = await self._get(
            "/api/v3/ticker/24hr",
            {"symbol": symbol},
            accept=lambda d: isinstance(d, dict) and d.get("priceChangePercent") is not None,
        )
        return Ticker24h(
            price_change_percent=parse_decimal(data.get("priceChangePercent")),
            high_price=parse_decimal(data.get("highPrice")),
            low_price=parse_decimal(data.get("lowPrice")),
            volume=parse_decimal(data.get("volume")),
            quote_volume=parse_decimal(data.get("quoteVolume")),
        )
