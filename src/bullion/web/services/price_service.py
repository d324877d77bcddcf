"""
报价缓存服务层
封装上游报价、TTL 缓存与兜底数据合成，为路由层提供统一接口
"""

import asyncio
from typing import List, Optional, Union

from loguru import logger

from bullion.data.cache import MemoryCache
from bullion.data.catalog import HistoryPeriod, InstrumentCatalog
from bullion.data.models import InstrumentPrice, MarketDataRow, PricePoint
from bullion.data.providers.base import PriceProvider, UpstreamFailed
from bullion.data.synthesis import PriceSynthesizer

MARKET_DATA_KEY = "market_data"
MARKET_DATA_LIMIT = 10


def _top_key(limit: int) -> str:
    return f"top_{limit}"


def _history_key(symbol: str, period: HistoryPeriod) -> str:
    return f"history_{symbol}_{period.value}"


class PriceCacheService:
    """
    报价缓存服务

    - provider 为 None 时处于纯兜底模式，不访问上游
    - 上游失败一律记录日志并回退到合成报价，不向调用方抛出
    - 返回 None / 空列表表示"该品种无数据"
    """

    def __init__(
        self,
        catalog: InstrumentCatalog,
        provider: Optional[PriceProvider] = None,
        cache: Optional[MemoryCache] = None,
        synthesizer: Optional[PriceSynthesizer] = None,
    ):
        self.catalog = catalog
        self.provider = provider
        self.cache = cache if cache is not None else MemoryCache()
        self.synthesizer = synthesizer or PriceSynthesizer(catalog.volatility)

        if provider is None:
            logger.info(f"[{self.market}] 未配置上游数据源，使用兜底报价")
        else:
            logger.info(f"[{self.market}] 上游数据源: {provider.name}")

    @property
    def market(self) -> str:
        return self.catalog.market_type.value

    @property
    def live_mode(self) -> bool:
        """是否配置了实时上游"""
        return self.provider is not None

    async def get_price(self, symbol: str) -> Optional[InstrumentPrice]:
        """
        获取单个品种报价

        Args:
            symbol: 品种代码（大小写不敏感）

        Returns:
            InstrumentPrice；目录外且上游无数据时返回 None
        """
        symbol = symbol.strip().upper()

        cached = self.cache.get(symbol)
        if cached is not None:
            return cached

        if self.provider is None:
            price = self.synthesizer.fallback_price(self.catalog, symbol)
        else:
            price = await self._fetch_live(symbol)

        if price is not None:
            self.cache.set(symbol, price)
        return price

    async def _fetch_live(self, symbol: str) -> Optional[InstrumentPrice]:
        entry = self.catalog.get(symbol)
        result = await self.provider.fetch_quote(symbol, entry)

        if isinstance(result, UpstreamFailed):
            logger.warning(f"[{self.market}] {self.provider.name} 获取 {symbol} 失败 ({result.reason})，使用兜底报价")
            return self.synthesizer.fallback_price(self.catalog, symbol)

        change = result.change_24h
        if change is None:
            # 上游不提供涨跌幅
            change = self.synthesizer.change_24h()

        return InstrumentPrice(
            symbol=symbol,
            name=entry.name if entry else symbol,
            price=result.price,
            change_24h=change,
            unit=entry.unit if entry else "unit",
        )

    async def get_prices(self, symbols: List[str]) -> List[InstrumentPrice]:
        """
        批量获取报价

        各品种并发获取；无法解析的品种直接丢弃，整体不会失败。
        """
        results = await asyncio.gather(
            *(self.get_price(symbol) for symbol in symbols),
            return_exceptions=True,
        )

        prices = []
        for symbol, result in zip(symbols, results):
            if isinstance(result, Exception):
                logger.opt(exception=result).error(f"[{self.market}] 获取 {symbol} 报价异常")
                continue
            if result is not None:
                prices.append(result)
        return prices

    async def get_top_instruments(self, limit: int = 10) -> List[InstrumentPrice]:
        """
        按目录顺序取前 limit 个品种的报价

        上限（50）由路由层校验。
        """
        key = _top_key(limit)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        prices = await self.get_prices(self.catalog.top(limit))
        self.cache.set(key, prices)
        return list(prices)

    async def get_market_data(self) -> List[MarketDataRow]:
        """列表展示用的行情数据（前 10 个品种）"""
        cached = self.cache.get(MARKET_DATA_KEY)
        if cached is not None:
            return list(cached)

        prices = await self.get_top_instruments(MARKET_DATA_LIMIT)
        rows = [MarketDataRow.from_price(price, self.market) for price in prices]
        self.cache.set(MARKET_DATA_KEY, rows)
        return list(rows)

    async def get_price_history(
        self,
        symbol: str,
        period: Union[HistoryPeriod, str] = HistoryPeriod.DAY_1,
    ) -> List[PricePoint]:
        """
        获取价格历史（模拟数据）

        以当前报价为锚点合成序列，最后一个点贴近当前价。

        Args:
            symbol: 品种代码
            period: 24h / 7d / 30d / 1y

        Returns:
            按时间升序的 PricePoint 列表；当前价不可用时返回空列表

        Raises:
            ValueError: 周期不合法
        """
        period = HistoryPeriod(period)
        symbol = symbol.strip().upper()
        key = _history_key(symbol, period)

        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        current = await self.get_price(symbol)
        if current is None:
            return []

        history = self.synthesizer.history(current.price, period)
        self.cache.set(key, history)
        return list(history)

    def clear_cache(self) -> int:
        """清空缓存，返回删除的条目数"""
        count = self.cache.clear()
        logger.info(f"[{self.market}] 已清空 {count} 条缓存")
        return count

    def cleanup_expired(self) -> int:
        """清理过期缓存"""
        return self.cache.cleanup_expired()

    def get_cache_size(self) -> int:
        """当前缓存条目数（含已过期未清理的条目）"""
        return len(self.cache)

    async def close(self) -> None:
        """释放上游连接"""
        if self.provider is not None:
            await self.provider.close()
