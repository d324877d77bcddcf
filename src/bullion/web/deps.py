"""
路由依赖
"""

from fastapi import HTTPException, Request

from bullion.web.services.price_service import PriceCacheService


def get_price_service(request: Request, market: str) -> PriceCacheService:
    """按路径中的市场名取出对应的报价服务"""
    services = request.app.state.price_services
    service = services.get(market.lower())
    if service is None:
        raise HTTPException(
            status_code=404,
            detail=f"未知市场: {market}，可选值: {', '.join(services)}",
        )
    return service
