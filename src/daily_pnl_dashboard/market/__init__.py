"""Exchange market data and account access."""

from .provider import BinanceRestProvider, MarketDataProvider, NO_ACCESS_CODES, ProviderError
from .signers import BinanceSpotSigner

__all__ = [
    "BinanceRestProvider",
    "BinanceSpotSigner",
    "MarketDataProvider",
    "NO_ACCESS_CODES",
    "ProviderError",
]
