"""
PriceCacheService 测试

覆盖范围：
- 代码大小写归一、TTL 命中与过期
- 兜底模式报价范围、未知品种
- 批量获取的容错
- top N、行情列表、价格历史及其缓存键
- 实时模式：上游成功、上游失败回退、上游提供涨跌幅
"""

import asyncio
from datetime import timedelta
from typing import Optional
from unittest.mock import AsyncMock, patch

import numpy as np
import pytest

from bullion.data.cache import MemoryCache
from bullion.data.catalog import METALS_ENTRIES, crypto_catalog, metals_catalog
from bullion.data.models import InstrumentCatalogEntry, MarketDataRow
from bullion.data.providers import FetchResult, PriceProvider, QuoteOk, UpstreamFailed
from bullion.data.synthesis import PriceSynthesizer
from bullion.web.services.price_service import PriceCacheService


def run_async(coro):
    """在同步上下文中执行协程"""
    return asyncio.run(coro)


class FakeProvider(PriceProvider):
    """
    模拟上游

    results 按代码返回预设结果，未配置的代码返回 UpstreamFailed；
    记录调用次数用于验证缓存。
    """

    def __init__(self, results=None):
        super().__init__("http://upstream.test")
        self.results = results or {}
        self.calls = []

    @property
    def name(self) -> str:
        return "fake"

    async def fetch_quote(
        self,
        symbol: str,
        entry: Optional[InstrumentCatalogEntry] = None,
    ) -> FetchResult:
        self.calls.append(symbol)
        return self.results.get(symbol, UpstreamFailed(reason="not configured"))


def make_live_service(provider, clock):
    catalog = metals_catalog()
    return PriceCacheService(
        catalog=catalog,
        provider=provider,
        cache=MemoryCache(ttl=timedelta(minutes=5), clock=clock),
        synthesizer=PriceSynthesizer(catalog.volatility, rng=np.random.default_rng(1)),
    )


class TestGetPrice:

    def test_symbol_canonicalisation_shares_cache_entry(self, metals_service):
        lower = run_async(metals_service.get_price("xau"))
        upper = run_async(metals_service.get_price("XAU"))

        assert lower is upper
        assert upper.symbol == "XAU"
        assert metals_service.get_cache_size() == 1

    def test_repeat_within_ttl_returns_identical_result(self, metals_service, clock):
        first = run_async(metals_service.get_price("XAG"))
        clock.advance(299)
        second = run_async(metals_service.get_price("XAG"))
        assert first is second

    def test_refreshes_after_ttl(self, metals_service, clock):
        first = run_async(metals_service.get_price("XAG"))
        clock.advance(301)
        second = run_async(metals_service.get_price("XAG"))
        assert second is not first
        assert second.price != first.price

    @pytest.mark.parametrize("seed", range(10))
    def test_fallback_bounds(self, seed):
        catalog = metals_catalog()
        service = PriceCacheService(
            catalog=catalog,
            synthesizer=PriceSynthesizer(catalog.volatility, rng=np.random.default_rng(seed)),
        )
        price = run_async(service.get_price("XAU"))
        assert 1900 <= price.price <= 2100
        assert -2 <= price.change_24h <= 2

    def test_unknown_symbol_returns_none_and_is_not_cached(self, metals_service):
        assert run_async(metals_service.get_price("ZZZZZ")) is None
        assert metals_service.get_cache_size() == 0

    def test_no_provider_means_fallback_mode(self, metals_service):
        assert metals_service.live_mode is False


class TestGetPrices:

    def test_unknown_symbols_dropped(self, metals_service):
        prices = run_async(metals_service.get_prices(["ZZZZZ", "XAU"]))
        assert len(prices) == 1
        assert prices[0].symbol == "XAU"

    def test_all_unknown_returns_empty(self, metals_service):
        assert run_async(metals_service.get_prices(["AAA", "BBB"])) == []

    def test_empty_input(self, metals_service):
        assert run_async(metals_service.get_prices([])) == []

    def test_unexpected_exception_does_not_fail_batch(self, metals_service):
        original = metals_service.get_price

        async def flaky(symbol):
            if symbol == "XAG":
                raise RuntimeError("boom")
            return await original(symbol)

        with patch.object(metals_service, "get_price", side_effect=flaky):
            prices = run_async(metals_service.get_prices(["XAU", "XAG", "XPT"]))

        assert [p.symbol for p in prices] == ["XAU", "XPT"]

    def test_preserves_request_order(self, metals_service):
        prices = run_async(metals_service.get_prices(["TIN", "XAU", "COPPER"]))
        assert [p.symbol for p in prices] == ["TIN", "XAU", "COPPER"]


class TestTopAndMarketData:

    def test_top_follows_catalog_order(self, metals_service):
        prices = run_async(metals_service.get_top_instruments(3))
        assert [p.symbol for p in prices] == ["XAU", "XAG", "XPT"]
        assert all(p.price > 0 for p in prices)

    def test_top_is_cached_under_limit_key(self, metals_service):
        run_async(metals_service.get_top_instruments(3))
        assert "top_3" in metals_service.cache.keys()
        # 三个品种 + top_3
        assert metals_service.get_cache_size() == 4

    def test_top_cache_hit_skips_lookup(self, metals_service):
        first = run_async(metals_service.get_top_instruments(2))
        with patch.object(metals_service, "get_prices", AsyncMock()) as mock:
            second = run_async(metals_service.get_top_instruments(2))
        mock.assert_not_called()
        assert [p.price for p in first] == [p.price for p in second]

    def test_top_larger_than_catalog(self, metals_service):
        prices = run_async(metals_service.get_top_instruments(50))
        assert len(prices) == len(METALS_ENTRIES)

    def test_market_data_rows(self, metals_service):
        rows = run_async(metals_service.get_market_data())

        assert len(rows) == 10
        assert all(isinstance(r, MarketDataRow) for r in rows)
        gold = rows[0]
        assert gold.id == "xau"
        assert gold.symbol == "XAU"
        assert gold.name == "Gold"
        assert gold.market_type == "metals"
        assert gold.current_price > 0
        assert "market_data" in metals_service.cache.keys()
        assert "top_10" in metals_service.cache.keys()

    def test_market_data_matches_cached_prices(self, metals_service):
        rows = run_async(metals_service.get_market_data())
        gold = run_async(metals_service.get_price("XAU"))
        assert rows[0].current_price == gold.price
        assert rows[0].price_change_percentage_24h == gold.change_24h

    def test_crypto_market_type(self, crypto_service):
        rows = run_async(crypto_service.get_market_data())
        assert rows[0].symbol == "BTC"
        assert {r.market_type for r in rows} == {"crypto"}
        assert all(-10 <= r.price_change_percentage_24h <= 10 for r in rows)


class TestPriceHistory:

    @pytest.mark.parametrize("period, expected", [("24h", 24), ("7d", 7), ("30d", 30), ("1y", 365)])
    def test_shape(self, metals_service, period, expected):
        history = run_async(metals_service.get_price_history("XAU", period))
        assert len(history) == expected
        assert all(p.price > 0 for p in history)

    @pytest.mark.parametrize("period", ["24h", "7d", "30d", "1y"])
    def test_anchored_on_current_price(self, metals_service, period):
        history = run_async(metals_service.get_price_history("XAU", period))
        current = run_async(metals_service.get_price("XAU"))
        assert history[-1].price == pytest.approx(current.price, rel=0.03)

    def test_cached_per_symbol_and_period(self, metals_service):
        first = run_async(metals_service.get_price_history("xau", "7d"))
        second = run_async(metals_service.get_price_history("XAU", "7d"))
        assert first == second
        assert "history_XAU_7d" in metals_service.cache.keys()

    def test_unknown_symbol_returns_empty(self, metals_service):
        assert run_async(metals_service.get_price_history("ZZZZZ", "24h")) == []
        assert metals_service.get_cache_size() == 0

    def test_invalid_period_raises(self, metals_service):
        with pytest.raises(ValueError):
            run_async(metals_service.get_price_history("XAU", "2w"))


class TestCacheAdmin:

    def test_clear_then_single_lookup(self, metals_service):
        run_async(metals_service.get_market_data())
        assert metals_service.get_cache_size() > 0

        metals_service.clear_cache()
        assert metals_service.get_cache_size() == 0

        run_async(metals_service.get_price("XAU"))
        assert metals_service.get_cache_size() == 1

    def test_cleanup_expired(self, metals_service, clock):
        run_async(metals_service.get_price("XAU"))
        clock.advance(301)
        run_async(metals_service.get_price("XAG"))

        assert metals_service.cleanup_expired() == 1
        assert metals_service.cache.keys() == ["XAG"]


class TestLiveMode:

    def test_live_price_used(self, clock):
        provider = FakeProvider({"XAU": QuoteOk(price=2345.6)})
        service = make_live_service(provider, clock)

        price = run_async(service.get_price("xau"))

        assert service.live_mode is True
        assert price.price == 2345.6
        assert price.name == "Gold"
        assert price.unit == "oz"
        # 上游不提供涨跌幅时合成
        assert -2 <= price.change_24h <= 2
        assert provider.calls == ["XAU"]

    def test_live_price_cached(self, clock):
        provider = FakeProvider({"XAU": QuoteOk(price=2345.6)})
        service = make_live_service(provider, clock)

        run_async(service.get_price("XAU"))
        run_async(service.get_price("XAU"))
        assert provider.calls == ["XAU"]

        clock.advance(301)
        run_async(service.get_price("XAU"))
        assert provider.calls == ["XAU", "XAU"]

    def test_upstream_change_preferred(self, clock):
        provider = FakeProvider({"XAU": QuoteOk(price=2345.6, change_24h=3.75)})
        service = make_live_service(provider, clock)
        assert run_async(service.get_price("XAU")).change_24h == 3.75

    def test_upstream_failure_falls_back(self, clock):
        service = make_live_service(FakeProvider(), clock)

        price = run_async(service.get_price("XAU"))

        assert price is not None
        assert 1900 <= price.price <= 2100
        assert service.get_cache_size() == 1

    def test_upstream_failure_for_unknown_symbol(self, clock):
        service = make_live_service(FakeProvider(), clock)
        assert run_async(service.get_price("ZZZZZ")) is None
        assert run_async(service.get_prices(["ZZZZZ"])) == []

    def test_live_symbol_outside_catalog(self, clock):
        provider = FakeProvider({"RHODIUM": QuoteOk(price=4500.0)})
        service = make_live_service(provider, clock)

        price = run_async(service.get_price("rhodium"))

        assert price.symbol == "RHODIUM"
        assert price.name == "RHODIUM"
        assert price.unit == "unit"

    def test_close_closes_provider(self, clock):
        provider = FakeProvider()
        service = make_live_service(provider, clock)
        with patch.object(provider, "close", AsyncMock()) as mock:
            run_async(service.close())
        mock.assert_awaited_once()


def test_services_have_independent_caches():
    first = PriceCacheService(catalog=metals_catalog())
    second = PriceCacheService(catalog=crypto_catalog())

    run_async(first.get_price("XAU"))

    assert first.get_cache_size() == 1
    assert second.get_cache_size() == 0
