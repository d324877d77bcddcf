"""
CoinGecko 报价提供者

使用 simple/price 接口，按 coin id 查询美元价格及 24h 涨跌幅。
未配置 key 时走公共接口，相邻请求间隔 1.1 秒以避开免费版的 429；
配置后通过 x-cg-pro-api-key 请求头传递，默认不限速。
"""

from typing import Dict, Optional

from pydantic import BaseModel, ValidationError

from bullion.data.models import InstrumentCatalogEntry
from bullion.data.providers.base import FetchResult, PriceProvider, QuoteOk, UpstreamFailed


class CoinGeckoQuote(BaseModel):
    """单个 coin 的报价"""
    usd: float
    usd_24h_change: Optional[float] = None


class CoinGeckoProvider(PriceProvider):
    """CoinGecko 提供者"""

    DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"
    FREE_TIER_INTERVAL = 1.1  # 秒

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 8.0,
        min_interval: Optional[float] = None,
    ):
        self.api_key = api_key or ""
        if min_interval is None:
            min_interval = 0.0 if self.api_key else self.FREE_TIER_INTERVAL
        super().__init__(base_url, timeout, min_interval)

    @property
    def name(self) -> str:
        return "coingecko"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["x-cg-pro-api-key"] = self.api_key
        return headers

    async def fetch_quote(
        self,
        symbol: str,
        entry: Optional[InstrumentCatalogEntry] = None,
    ) -> FetchResult:
        coin_id = entry.upstream_key if entry else symbol.lower()
        params = {
            "ids": coin_id,
            "vs_currencies": "usd",
            "include_24hr_change": "true",
        }

        payload = await self._safe_request("/simple/price", params)
        if isinstance(payload, UpstreamFailed):
            return payload

        return self._parse_response(coin_id, payload)

    def _parse_response(self, coin_id: str, payload) -> FetchResult:
        """
        校验并解析响应

        响应格式: {"bitcoin": {"usd": 45000.0, "usd_24h_change": 1.2}}
        """
        if not isinstance(payload, dict) or coin_id not in payload:
            return UpstreamFailed(reason=f"no price for {coin_id}")

        try:
            quote = CoinGeckoQuote.model_validate(payload[coin_id])
        except ValidationError as e:
            return UpstreamFailed(reason=f"malformed payload: {e.error_count()} validation error(s)")

        if quote.usd <= 0:
            return UpstreamFailed(reason=f"non-positive price for {coin_id}: {quote.usd}")

        return QuoteOk(price=quote.usd, change_24h=quote.usd_24h_change)
