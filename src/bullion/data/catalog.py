"""
品种目录
定义支持的金属与加密货币品种、波动率参数及历史周期
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Dict, Iterator, List, Optional

from bullion.data.models import InstrumentCatalogEntry


class MarketType(str, Enum):
    """市场类型"""
    METALS = "metals"
    CRYPTO = "crypto"


class HistoryPeriod(Enum):
    """价格历史周期: (采样点数, 采样间隔)"""
    DAY_1 = "24h"
    WEEK_1 = "7d"
    MONTH_1 = "30d"
    YEAR_1 = "1y"

    @property
    def points(self) -> int:
        return _PERIOD_SHAPE[self][0]

    @property
    def spacing(self) -> timedelta:
        return _PERIOD_SHAPE[self][1]

    @classmethod
    def values(cls) -> List[str]:
        return [p.value for p in cls]


_PERIOD_SHAPE = {
    HistoryPeriod.DAY_1: (24, timedelta(hours=1)),
    HistoryPeriod.WEEK_1: (7, timedelta(days=1)),
    HistoryPeriod.MONTH_1: (30, timedelta(days=1)),
    HistoryPeriod.YEAR_1: (365, timedelta(days=1)),
}


@dataclass(frozen=True)
class VolatilityProfile:
    """
    合成数据的波动参数

    Attributes:
        jitter: 兜底价格相对参考价的随机浮动比例（0.05 即 ±5%）
        change_range: 合成 24h 涨跌幅的范围（百分比，2.0 即 ±2%）
        step_variance: 历史序列每一步的随机扰动比例（0.01 即 ±1%）
    """
    jitter: float = 0.05
    change_range: float = 2.0
    step_variance: float = 0.01


# 金属波动较小
METALS_VOLATILITY = VolatilityProfile(jitter=0.05, change_range=2.0, step_variance=0.01)
CRYPTO_VOLATILITY = VolatilityProfile(jitter=0.05, change_range=10.0, step_variance=0.02)


class InstrumentCatalog:
    """
    品种目录

    构造后不可变。声明顺序即"重要性"排序，top N 取前 N 个。
    """

    def __init__(
        self,
        market_type: MarketType,
        entries: List[InstrumentCatalogEntry],
        volatility: VolatilityProfile,
    ):
        self.market_type = market_type
        self.volatility = volatility
        self._entries: Dict[str, InstrumentCatalogEntry] = {
            entry.symbol.upper(): entry for entry in entries
        }

    def get(self, symbol: str) -> Optional[InstrumentCatalogEntry]:
        """按代码查找条目（大小写不敏感）"""
        return self._entries.get(symbol.upper())

    def __contains__(self, symbol: str) -> bool:
        return symbol.upper() in self._entries

    def __iter__(self) -> Iterator[InstrumentCatalogEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def symbols(self) -> List[str]:
        return list(self._entries.keys())

    def top(self, limit: int) -> List[str]:
        """按声明顺序取前 limit 个代码"""
        return self.symbols[:max(limit, 0)]


def _metal(symbol: str, name: str, unit: str, price: float) -> InstrumentCatalogEntry:
    return InstrumentCatalogEntry(
        symbol=symbol,
        name=name,
        unit=unit,
        reference_price=price,
        market_type=MarketType.METALS.value,
    )


def _coin(symbol: str, name: str, coin_id: str, price: float) -> InstrumentCatalogEntry:
    return InstrumentCatalogEntry(
        symbol=symbol,
        name=name,
        unit="coin",
        reference_price=price,
        market_type=MarketType.CRYPTO.value,
        upstream_id=coin_id,
    )


METALS_ENTRIES = [
    _metal("XAU", "Gold", "oz", 2000.0),
    _metal("XAG", "Silver", "oz", 24.0),
    _metal("XPT", "Platinum", "oz", 950.0),
    _metal("XPD", "Palladium", "oz", 1800.0),
    _metal("COPPER", "Copper", "lb", 4.2),
    _metal("ALUMINUM", "Aluminum", "lb", 0.85),
    _metal("ZINC", "Zinc", "lb", 1.15),
    _metal("NICKEL", "Nickel", "lb", 8.5),
    _metal("LEAD", "Lead", "lb", 0.95),
    _metal("TIN", "Tin", "lb", 15.5),
]

# CoinGecko 使用 coin id 而不是代码
CRYPTO_ENTRIES = [
    _coin("BTC", "Bitcoin", "bitcoin", 45000.0),
    _coin("ETH", "Ethereum", "ethereum", 2800.0),
    _coin("BNB", "BNB", "binancecoin", 350.0),
    _coin("ADA", "Cardano", "cardano", 0.5),
    _coin("SOL", "Solana", "solana", 100.0),
    _coin("XRP", "XRP", "ripple", 0.6),
    _coin("DOT", "Polkadot", "polkadot", 7.0),
    _coin("DOGE", "Dogecoin", "dogecoin", 0.08),
    _coin("AVAX", "Avalanche", "avalanche-2", 25.0),
    _coin("MATIC", "Polygon", "matic-network", 0.9),
]


def metals_catalog() -> InstrumentCatalog:
    """贵金属及工业金属目录"""
    return InstrumentCatalog(MarketType.METALS, METALS_ENTRIES, METALS_VOLATILITY)


def crypto_catalog() -> InstrumentCatalog:
    """加密货币目录"""
    return InstrumentCatalog(MarketType.CRYPTO, CRYPTO_ENTRIES, CRYPTO_VOLATILITY)
