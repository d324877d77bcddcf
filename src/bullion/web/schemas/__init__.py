"""
Pydantic 模型模块
"""

from bullion.web.schemas.cache import (
    CacheCleanupResponse,
    CacheClearResponse,
    CacheStatsResponse,
)
from bullion.web.schemas.market import (
    CatalogEntryResponse,
    InstrumentPriceResponse,
    MarketDataRowResponse,
    MarketHealthResponse,
    PricePointResponse,
    PricesRequest,
)

__all__ = [
    "CacheCleanupResponse",
    "CacheClearResponse",
    "CacheStatsResponse",
    "CatalogEntryResponse",
    "InstrumentPriceResponse",
    "MarketDataRowResponse",
    "MarketHealthResponse",
    "PricePointResponse",
    "PricesRequest",
]
