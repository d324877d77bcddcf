"""
健康检查路由
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """
    健康检查端点

    返回服务状态及各市场的数据源模式与缓存条目数
    """
    services = request.app.state.price_services
    markets = {
        name: {
            "live_mode": service.live_mode,
            "cache_size": service.get_cache_size(),
        }
        for name, service in services.items()
    }

    return {
        "status": "healthy",
        "markets": markets,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
