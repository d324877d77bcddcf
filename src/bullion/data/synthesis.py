"""
兜底数据合成

上游不可用时生成看起来合理的报价、24h 涨跌幅和价格历史。
这些数据是模拟值，不代表真实行情。
"""

import math
from datetime import datetime
from typing import Callable, List, Optional

import numpy as np

from bullion.data.catalog import HistoryPeriod, InstrumentCatalog, VolatilityProfile
from bullion.data.models import InstrumentPrice, PricePoint, utc_now

# 低价品种保留的最少有效数字
MIN_SIGNIFICANT_DIGITS = 4

# 各周期时间戳的显示格式
TIMESTAMP_FORMATS = {
    HistoryPeriod.DAY_1: "%H:%M",
    HistoryPeriod.WEEK_1: "%b %d",
    HistoryPeriod.MONTH_1: "%b %d",
    HistoryPeriod.YEAR_1: "%Y-%m-%d",
}


def round_price(price: float) -> float:
    """
    价格取整

    >=1 保留两位小数；低于 1 时至少保留六位小数，且不少于 4 位有效数字，
    避免极低价币种被取整为 0。
    """
    if price >= 1:
        return round(price, 2)
    if price <= 0:
        return round(price, 6)
    decimals = max(6, MIN_SIGNIFICANT_DIGITS - 1 - math.floor(math.log10(price)))
    return round(price, decimals)


class PriceSynthesizer:
    """
    兜底价格合成器

    随机数来自 numpy Generator，测试可传入固定种子。
    """

    def __init__(
        self,
        volatility: VolatilityProfile,
        rng: Optional[np.random.Generator] = None,
        now: Callable[[], datetime] = utc_now,
    ):
        self.volatility = volatility
        self.rng = rng if rng is not None else np.random.default_rng()
        self._now = now

    def change_24h(self) -> float:
        """合成 24h 涨跌幅（百分比），均匀分布于 ±change_range"""
        bound = self.volatility.change_range
        return float(self.rng.uniform(-bound, bound))

    def fallback_price(
        self,
        catalog: InstrumentCatalog,
        symbol: str,
    ) -> Optional[InstrumentPrice]:
        """
        基于目录参考价生成兜底报价

        Args:
            catalog: 品种目录
            symbol: 品种代码

        Returns:
            InstrumentPrice；目录中不存在该品种时返回 None
        """
        entry = catalog.get(symbol)
        if entry is None:
            return None

        jitter = self.volatility.jitter
        factor = self.rng.uniform(1 - jitter, 1 + jitter)

        return InstrumentPrice(
            symbol=entry.symbol,
            name=entry.name,
            price=float(entry.reference_price * factor),
            change_24h=self.change_24h(),
            unit=entry.unit,
            last_updated=self._now(),
        )

    def history(self, seed_price: float, period: HistoryPeriod) -> List[PricePoint]:
        """
        以当前价为锚点向过去生成价格历史

        从最近一个点开始，每一步先施加 ±step_variance 的乘性扰动再记录，
        越早的点偏离越多；最近一个点只经过一次扰动，因此贴近当前价。

        Args:
            seed_price: 当前价格
            period: 历史周期

        Returns:
            按时间升序排列的 PricePoint 列表
        """
        variance = self.volatility.step_variance
        steps = self.rng.uniform(-variance, variance, size=period.points)
        fmt = TIMESTAMP_FORMATS[period]
        now = self._now()

        price = seed_price
        points = []
        for step, perturbation in enumerate(steps):
            price = float(price * (1 + perturbation))
            timestamp = now - step * period.spacing
            points.append(PricePoint(timestamp=timestamp.strftime(fmt), price=round_price(price)))

        points.reverse()
        return points
