"""
数据层模块
提供品种目录、报价缓存、兜底数据合成和上游报价获取
"""

from bullion.data.cache import MemoryCache
from bullion.data.catalog import (
    HistoryPeriod,
    InstrumentCatalog,
    MarketType,
    VolatilityProfile,
    crypto_catalog,
    metals_catalog,
)
from bullion.data.models import (
    CacheEntry,
    InstrumentCatalogEntry,
    InstrumentPrice,
    MarketDataRow,
    PricePoint,
)
from bullion.data.synthesis import PriceSynthesizer

__all__ = [
    "MemoryCache",
    "HistoryPeriod",
    "InstrumentCatalog",
    "MarketType",
    "VolatilityProfile",
    "crypto_catalog",
    "metals_catalog",
    "CacheEntry",
    "InstrumentCatalogEntry",
    "InstrumentPrice",
    "MarketDataRow",
    "PricePoint",
    "PriceSynthesizer",
]
