"""
Metals-API 报价提供者

接口文档: https://metals-api.com/documentation
latest 接口以 USD 为基准返回汇率（1 USD 可兑换的金属数量），
需要取倒数得到每单位金属的美元价格。该接口不提供 24h 涨跌幅。
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from bullion.data.models import InstrumentCatalogEntry
from bullion.data.providers.base import FetchResult, PriceProvider, QuoteOk, UpstreamFailed

# 视为"未配置"的占位 key
PLACEHOLDER_KEYS = {"", "your_metals_api_key_here"}


class MetalsApiResponse(BaseModel):
    """latest 接口响应"""
    success: bool
    timestamp: Optional[int] = None
    base: Optional[str] = None
    rates: Dict[str, float] = Field(default_factory=dict)


def is_usable_key(api_key: Optional[str]) -> bool:
    """key 存在且不是占位值"""
    return api_key is not None and api_key.strip() not in PLACEHOLDER_KEYS


class MetalsApiProvider(PriceProvider):
    """
    Metals-API 提供者

    每次请求只查询一个品种，不做重试；失败由调用方走兜底逻辑。
    """

    DEFAULT_BASE_URL = "https://metals-api.com/api"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 8.0,
    ):
        if not is_usable_key(api_key):
            raise ValueError("Metals-API key 未设置。请设置环境变量 METALS_API_KEY")
        super().__init__(base_url, timeout)
        self.api_key = api_key

    @property
    def name(self) -> str:
        return "metals-api"

    async def fetch_quote(
        self,
        symbol: str,
        entry: Optional[InstrumentCatalogEntry] = None,
    ) -> FetchResult:
        key = entry.upstream_key if entry else symbol.upper()
        params = {
            "access_key": self.api_key,
            "base": "USD",
            "symbols": key,
        }

        payload = await self._safe_request("/latest", params)
        if isinstance(payload, UpstreamFailed):
            return payload

        return self._parse_response(key, payload)

    def _parse_response(self, key: str, payload) -> FetchResult:
        """
        校验并解析响应

        Args:
            key: 请求的品种代码
            payload: 已解码的 JSON

        Returns:
            QuoteOk（change_24h 为 None）或 UpstreamFailed
        """
        try:
            data = MetalsApiResponse.model_validate(payload)
        except ValidationError as e:
            return UpstreamFailed(reason=f"malformed payload: {e.error_count()} validation error(s)")

        if not data.success:
            return UpstreamFailed(reason="success=false")

        rate = data.rates.get(key)
        if rate is None:
            return UpstreamFailed(reason=f"no rate for {key}")
        if rate <= 0:
            return UpstreamFailed(reason=f"non-positive rate for {key}: {rate}")

        return QuoteOk(price=1.0 / rate)
