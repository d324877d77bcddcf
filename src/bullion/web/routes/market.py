"""
行情数据 API 路由
"""

import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from loguru import logger

from bullion.data.catalog import HistoryPeriod
from bullion.web.deps import get_price_service
from bullion.web.schemas.market import (
    CatalogEntryResponse,
    InstrumentPriceResponse,
    MarketDataRowResponse,
    MarketHealthResponse,
    PricePointResponse,
    PricesRequest,
)
from bullion.web.services.price_service import PriceCacheService

router = APIRouter()

MAX_TOP_LIMIT = 50
DEFAULT_TOP_LIMIT = 10


@router.get("/market-data", response_model=List[MarketDataRowResponse])
async def get_market_data(
    service: PriceCacheService = Depends(get_price_service),
) -> List[MarketDataRowResponse]:
    """
    获取行情列表

    返回前 10 个品种的展示数据
    """
    rows = await service.get_market_data()
    return [MarketDataRowResponse(**row.to_dict()) for row in rows]


@router.get("/price/{symbol}", response_model=InstrumentPriceResponse)
async def get_price(
    symbol: str,
    service: PriceCacheService = Depends(get_price_service),
) -> InstrumentPriceResponse:
    """获取单个品种报价"""
    price = await service.get_price(symbol)
    if price is None:
        raise HTTPException(status_code=404, detail=f"未找到 {symbol} 的报价数据")
    return InstrumentPriceResponse(**price.to_dict())


@router.post("/prices", response_model=List[InstrumentPriceResponse])
async def get_prices(
    body: PricesRequest,
    service: PriceCacheService = Depends(get_price_service),
) -> List[InstrumentPriceResponse]:
    """
    批量获取报价

    无法解析的品种会被忽略
    """
    prices = await service.get_prices(body.symbols)
    return [InstrumentPriceResponse(**price.to_dict()) for price in prices]


@router.get("/top/{limit}", response_model=List[InstrumentPriceResponse])
async def get_top(
    limit: int,
    service: PriceCacheService = Depends(get_price_service),
) -> List[InstrumentPriceResponse]:
    """按目录顺序获取前 limit 个品种报价（limit 不超过 50）"""
    if limit > MAX_TOP_LIMIT:
        raise HTTPException(status_code=400, detail=f"limit 不能超过 {MAX_TOP_LIMIT}")
    if limit < 1:
        raise HTTPException(status_code=400, detail="limit 必须为正整数")

    prices = await service.get_top_instruments(limit)
    return [InstrumentPriceResponse(**price.to_dict()) for price in prices]


@router.get("/top", response_model=List[InstrumentPriceResponse])
async def get_top_default(
    service: PriceCacheService = Depends(get_price_service),
) -> List[InstrumentPriceResponse]:
    """获取前 10 个品种报价"""
    prices = await service.get_top_instruments(DEFAULT_TOP_LIMIT)
    return [InstrumentPriceResponse(**price.to_dict()) for price in prices]


@router.get("/history/{symbol}", response_model=List[PricePointResponse])
async def get_price_history(
    symbol: str,
    period: str = Query(default="24h", description="周期 (24h, 7d, 30d, 1y)"),
    service: PriceCacheService = Depends(get_price_service),
) -> List[PricePointResponse]:
    """
    获取价格历史

    返回以当前价为锚点的模拟序列，用于图表展示
    """
    if period not in HistoryPeriod.values():
        raise HTTPException(
            status_code=400,
            detail=f"无效的周期: {period}，可选值: {', '.join(HistoryPeriod.values())}",
        )

    history = await service.get_price_history(symbol, period)
    return [PricePointResponse(**point.to_dict()) for point in history]


@router.get("/catalog", response_model=List[CatalogEntryResponse])
async def get_catalog(
    service: PriceCacheService = Depends(get_price_service),
) -> List[CatalogEntryResponse]:
    """获取支持的品种目录"""
    return [CatalogEntryResponse(**entry.to_dict()) for entry in service.catalog]


@router.get("/health", response_model=MarketHealthResponse)
async def market_health(
    service: PriceCacheService = Depends(get_price_service),
):
    """
    市场健康检查

    用目录中第一个品种探测报价；实时或兜底数据均视为健康
    """
    sample_symbol = service.catalog.symbols[0]
    try:
        price = await service.get_price(sample_symbol)
    except Exception as e:
        logger.exception(f"[{service.market}] 健康检查失败 (symbol={sample_symbol})")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": int(time.time() * 1000),
                "service": service.market,
                "error": type(e).__name__,
            },
        )

    return MarketHealthResponse(
        status="healthy",
        timestamp=int(time.time() * 1000),
        service=service.market,
        live_mode=service.live_mode,
        test_data="available" if price is not None and service.live_mode else "fallback",
    )
