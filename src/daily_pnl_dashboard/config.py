"""Dashboard configuration objects and helpers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from pathlib import Path
from typing import Any

import yaml

DEFAULT_TRACKED_PAIRS: tuple[str, ...] = (
    "BTCUSDT", "TAOUSDT", "XRPUSDT", "BNBUSDT", "SOLUSDT",
    "ICPUSDT", "FILUSDT", "FETUSDT", "ONDOUSDT", "JUPUSDT",
    "ARKMUSDT", "RNDRUSDT", "INJUSDT", "ETHUSDT", "DOTUSDT",
    "AVAXUSDT", "LINKUSDT", "MATICUSDT", "APTUSDT", "NEARUSDT",
)

DEFAULT_BASE_URLS: tuple[str, ...] = (
    "https://api1.binance.com",
    "https://api4.binance.com",
    "https://api.binance.com",
)


@dataclass(slots=True)
class ProviderConfig:
    base_urls: list[str] = field(default_factory=lambda: list(DEFAULT_BASE_URLS))
    api_key_env: str = "BINANCE_API_KEY"
    api_secret_env: str = "BINANCE_SECRET"
    timeout_seconds: float = 10.0
    recv_window_ms: int = 5000

    def credentials(self) -> tuple[str, str]:
        """Read API key and secret from the configured environment variables."""
        return (
            os.environ.get(self.api_key_env, "").strip(),
            os.environ.get(self.api_secret_env, "").strip(),
        )


@dataclass(slots=True)
class DashboardConfig:
    tracked_pairs: list[str] = field(default_factory=lambda: list(DEFAULT_TRACKED_PAIRS))
    valuation_currency: str = "USDT"
    discount_currency: str = "BNB"
    fallback_discount_price: float = 600.0
    quantity_epsilon: float = 1e-6
    refresh_seconds: int = 30
    alert_cooldown_seconds: float = 300.0
    provider: ProviderConfig = field(default_factory=ProviderConfig)

    def __post_init__(self) -> None:
        if not self.tracked_pairs:
            raise ValueError("tracked_pairs must not be empty")
        self.tracked_pairs = list(dict.fromkeys(str(p).upper() for p in self.tracked_pairs))
        self.valuation_currency = self.valuation_currency.upper()
        self.discount_currency = self.discount_currency.upper()

    @property
    def discount_pair(self) -> str:
        return f"{self.discount_currency}{self.valuation_currency}"

    def asset_of(self, symbol: str) -> str:
        """Return the base asset of a pair quoted in the valuation currency."""
        if symbol.endswith(self.valuation_currency) and symbol != self.valuation_currency:
            return symbol[: -len(self.valuation_currency)]
        return symbol

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "DashboardConfig":
        return DashboardConfig(
            tracked_pairs=list(payload.get("tracked_pairs", DEFAULT_TRACKED_PAIRS)),
            valuation_currency=payload.get("valuation_currency", "USDT"),
            discount_currency=payload.get("discount_currency", "BNB"),
            fallback_discount_price=float(payload.get("fallback_discount_price", 600.0)),
            quantity_epsilon=float(payload.get("quantity_epsilon", 1e-6)),
            refresh_seconds=int(payload.get("refresh_seconds", 30)),
            alert_cooldown_seconds=float(payload.get("alert_cooldown_seconds", 300.0)),
            provider=ProviderConfig(**payload.get("provider", {})),
        )


def load_config(path: str | Path) -> DashboardConfig:
    """Load dashboard configuration from YAML."""
    file_path = Path(path)
    with file_path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    return DashboardConfig.from_dict(payload)


def save_config(config: DashboardConfig, path: str | Path) -> None:
    """Persist dashboard configuration to YAML."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config.to_dict(), handle, sort_keys=False)
