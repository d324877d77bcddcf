"""
缓存相关 Pydantic 模型
"""

from pydantic import BaseModel, ConfigDict, Field


class CacheStatsResponse(BaseModel):
    """缓存统计响应"""
    model_config = ConfigDict(populate_by_name=True)

    cache_size: int = Field(alias="cacheSize")
    timestamp: int


class CacheClearResponse(BaseModel):
    """清空缓存响应"""
    message: str
    timestamp: int


class CacheCleanupResponse(BaseModel):
    """清理过期缓存响应"""
    cleaned: int
    message: str
