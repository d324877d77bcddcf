"""
数据模型模块
定义行情报价、品种目录和价格历史的数据结构
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, TypeVar

T = TypeVar("T")


def utc_now() -> datetime:
    """带时区的当前 UTC 时间，序列化后带 +00:00 后缀"""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class InstrumentPrice:
    """
    单个品种的当前报价

    缓存中的报价不可变，刷新时整体替换。
    """
    symbol: str
    name: str
    price: float
    change_24h: float
    unit: str
    last_updated: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "change_24h": self.change_24h,
            "unit": self.unit,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class InstrumentCatalogEntry:
    """
    品种目录条目

    Attributes:
        symbol: 大写代码，如 XAU、BTC
        name: 显示名称
        unit: 计价单位（oz / lb / coin）
        reference_price: 无实时数据时使用的参考价（USD）
        market_type: 所属市场（metals / crypto）
        upstream_id: 上游数据源使用的标识，为空时使用 symbol
    """
    symbol: str
    name: str
    unit: str
    reference_price: float
    market_type: str
    upstream_id: str = ""

    @property
    def upstream_key(self) -> str:
        return self.upstream_id or self.symbol

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "unit": self.unit,
            "reference_price": self.reference_price,
            "market_type": self.market_type,
        }


@dataclass(frozen=True)
class PricePoint:
    """价格历史中的单个采样点"""
    timestamp: str
    price: float

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "price": self.price}


@dataclass(frozen=True)
class MarketDataRow:
    """列表展示用的行情行"""
    id: str
    symbol: str
    name: str
    current_price: float
    price_change_percentage_24h: float
    unit: str
    market_type: str
    last_updated: datetime

    @classmethod
    def from_price(cls, price: InstrumentPrice, market_type: str) -> "MarketDataRow":
        """从报价构建展示行"""
        return cls(
            id=price.symbol.lower(),
            symbol=price.symbol,
            name=price.name,
            current_price=price.price,
            price_change_percentage_24h=price.change_24h,
            unit=price.unit,
            market_type=market_type,
            last_updated=price.last_updated,
        )

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "current_price": self.current_price,
            "price_change_percentage_24h": self.price_change_percentage_24h,
            "unit": self.unit,
            "market_type": self.market_type,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """
    缓存条目

    value 可以是单个报价、报价列表或历史序列；
    timestamp 为写入时的 unix 时间戳（秒）。
    """
    value: T
    timestamp: float

    def age(self, now: float) -> float:
        """条目年龄（秒）"""
        return now - self.timestamp

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        """年龄超过 TTL 即视为过期"""
        return self.age(now) > ttl_seconds
