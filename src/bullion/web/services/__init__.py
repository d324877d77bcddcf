"""
服务层模块
"""

from bullion.web.services.price_service import PriceCacheService

__all__ = ["PriceCacheService"]
