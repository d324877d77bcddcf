"""
缓存 API 路由
"""

import time

from fastapi import APIRouter, Depends

from bullion.web.auth import require_admin
from bullion.web.deps import get_price_service
from bullion.web.schemas.cache import (
    CacheCleanupResponse,
    CacheClearResponse,
    CacheStatsResponse,
)
from bullion.web.services.price_service import PriceCacheService

router = APIRouter()


@router.get("/cache-stats", response_model=CacheStatsResponse)
async def get_cache_stats(
    service: PriceCacheService = Depends(get_price_service),
) -> CacheStatsResponse:
    """获取缓存条目数"""
    return CacheStatsResponse(
        cache_size=service.get_cache_size(),
        timestamp=int(time.time() * 1000),
    )


@router.delete(
    "/cache",
    response_model=CacheClearResponse,
    dependencies=[Depends(require_admin)],
)
async def clear_cache(
    service: PriceCacheService = Depends(get_price_service),
) -> CacheClearResponse:
    """清空缓存（管理员）"""
    service.clear_cache()
    return CacheClearResponse(
        message="缓存已清空",
        timestamp=int(time.time() * 1000),
    )


@router.post(
    "/cache/cleanup",
    response_model=CacheCleanupResponse,
    dependencies=[Depends(require_admin)],
)
async def cleanup_expired(
    service: PriceCacheService = Depends(get_price_service),
) -> CacheCleanupResponse:
    """
    清理过期缓存

    返回清理的条目数
    """
    count = service.cleanup_expired()
    return CacheCleanupResponse(cleaned=count, message=f"已清理 {count} 条过期缓存")
