"""
行情数据 Pydantic 模型
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class InstrumentPriceResponse(BaseModel):
    """单个品种报价"""
    symbol: str
    name: str
    price: float
    change_24h: float
    unit: str
    last_updated: datetime


class MarketDataRowResponse(BaseModel):
    """行情列表行"""
    id: str
    symbol: str
    name: str
    current_price: float
    price_change_percentage_24h: float
    unit: str
    market_type: str
    last_updated: datetime


class PricePointResponse(BaseModel):
    """价格历史采样点"""
    timestamp: str
    price: float


class CatalogEntryResponse(BaseModel):
    """品种目录条目"""
    symbol: str
    name: str
    unit: str
    reference_price: float
    market_type: str


class PricesRequest(BaseModel):
    """批量报价请求"""
    symbols: List[str] = Field(..., description="品种代码列表")


class MarketHealthResponse(BaseModel):
    """单个市场健康检查"""
    status: str
    timestamp: int
    service: str
    live_mode: bool
    test_data: str
