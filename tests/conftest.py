"""
测试全局配置

清除会影响数据源模式的环境变量，保证测试默认运行在离线兜底模式。
"""

from datetime import timedelta

import numpy as np
import pytest

from bullion.data.cache import MemoryCache
from bullion.data.catalog import crypto_catalog, metals_catalog
from bullion.data.synthesis import PriceSynthesizer
from bullion.utils.config import reset_config
from bullion.web.services.price_service import PriceCacheService

ENV_VARS = (
    "METALS_API_KEY",
    "METALS_API_BASE_URL",
    "METALS_API_TIMEOUT",
    "COINGECKO_ENABLED",
    "COINGECKO_API_KEY",
    "COINGECKO_BASE_URL",
    "PRICE_CACHE_TTL",
    "PRICE_ADMIN_TOKEN",
    "BULLION_CONFIG",
)


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """每个测试前清除相关环境变量并重置全局配置"""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metals_service(clock):
    """纯兜底模式的金属报价服务"""
    catalog = metals_catalog()
    return PriceCacheService(
        catalog=catalog,
        cache=MemoryCache(ttl=timedelta(minutes=5), clock=clock),
        synthesizer=PriceSynthesizer(catalog.volatility, rng=np.random.default_rng(42)),
    )


@pytest.fixture
def crypto_service(clock):
    """纯兜底模式的加密货币报价服务"""
    catalog = crypto_catalog()
    return PriceCacheService(
        catalog=catalog,
        cache=MemoryCache(ttl=timedelta(minutes=5), clock=clock),
        synthesizer=PriceSynthesizer(catalog.volatility, rng=np.random.default_rng(7)),
    )
