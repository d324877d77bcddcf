"""
报价提供者模块
"""

from bullion.data.providers.base import (
    FetchResult,
    PriceProvider,
    QuoteOk,
    RateLimiter,
    UpstreamError,
    UpstreamFailed,
)
from bullion.data.providers.coingecko import CoinGeckoProvider
from bullion.data.providers.metals_api import MetalsApiProvider, is_usable_key

__all__ = [
    "FetchResult",
    "PriceProvider",
    "QuoteOk",
    "RateLimiter",
    "UpstreamError",
    "UpstreamFailed",
    "CoinGeckoProvider",
    "MetalsApiProvider",
    "is_usable_key",
]
