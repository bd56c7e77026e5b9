"""Daily trade P&L dashboard package."""

from .config import DashboardConfig, ProviderConfig, load_config, save_config

__all__ = [
    "DashboardConfig",
    "ProviderConfig",
    "load_config",
    "save_config",
]
