"""
报价提供者基类
定义获取实时报价的统一接口与结果类型
"""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

import aiohttp
from loguru import logger

from bullion.data.models import InstrumentCatalogEntry


class UpstreamError(Exception):
    """上游返回了非成功状态"""


@dataclass(frozen=True)
class QuoteOk:
    """
    上游成功返回的报价

    change_24h 为 None 表示上游不提供涨跌幅。
    """
    price: float
    change_24h: Optional[float] = None


@dataclass(frozen=True)
class UpstreamFailed:
    """上游不可用（网络错误、非 2xx、响应格式不符等），reason 仅用于日志"""
    reason: str


FetchResult = Union[QuoteOk, UpstreamFailed]


class RateLimiter:
    """
    请求节流器

    相邻两次请求至少间隔 min_interval 秒；上游通过 x-ratelimit-remaining
    报告额度耗尽时，等待到 x-ratelimit-reset（unix 秒），最多等待 max_reset_wait 秒。
    min_interval 为 0 时不做间隔控制。
    """

    def __init__(self, min_interval: float = 0.0, max_reset_wait: float = 60.0):
        self.min_interval = min_interval
        self.max_reset_wait = max_reset_wait
        self._last_call: Optional[float] = None  # monotonic
        self._blocked_until = 0.0  # unix 时间戳
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """获取请求许可，必要时阻塞等待"""
        async with self._lock:
            wait_seconds = 0.0

            if self._blocked_until:
                wait_seconds = min(self._blocked_until - time.time(), self.max_reset_wait)

            if self.min_interval > 0 and self._last_call is not None:
                wait_seconds = max(wait_seconds, self._last_call + self.min_interval - time.monotonic())

            if wait_seconds > 0:
                logger.debug(f"API 限流，等待 {wait_seconds:.2f} 秒")
                await asyncio.sleep(wait_seconds)

            self._last_call = time.monotonic()

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """根据响应头记录剩余额度"""
        remaining = headers.get("x-ratelimit-remaining")
        reset = headers.get("x-ratelimit-reset")
        if remaining is None or reset is None:
            return

        try:
            exhausted = int(remaining) <= 0
            reset_at = float(reset)
        except ValueError:
            return

        self._blocked_until = reset_at if exhausted else 0.0


class PriceProvider(ABC):
    """
    报价提供者抽象基类

    fetch_quote 从不抛出上游相关异常，所有失败都以 UpstreamFailed 返回。
    """

    def __init__(self, base_url: str, timeout: float = 8.0, min_interval: float = 0.0):
        """
        初始化提供者

        Args:
            base_url: API 根地址
            timeout: 单次请求超时（秒）
            min_interval: 相邻请求的最小间隔（秒），0 表示不限速
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self.rate_limiter = RateLimiter(min_interval)

    @property
    @abstractmethod
    def name(self) -> str:
        """数据源名称"""
        pass

    @abstractmethod
    async def fetch_quote(
        self,
        symbol: str,
        entry: Optional[InstrumentCatalogEntry] = None,
    ) -> FetchResult:
        """
        获取单个品种的实时报价

        Args:
            symbol: 大写品种代码
            entry: 目录条目（提供上游标识），目录外品种为 None

        Returns:
            QuoteOk 或 UpstreamFailed
        """
        pass

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 HTTP 会话"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=self._headers(),
            )
        return self._session

    async def close(self) -> None:
        """关闭 HTTP 会话"""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _request_json(self, path: str, params: Dict[str, str]) -> Any:
        """
        发送 GET 请求并解析 JSON

        Raises:
            UpstreamError: 非 200 状态
            aiohttp.ClientError / asyncio.TimeoutError: 网络错误或超时
        """
        await self.rate_limiter.acquire()
        session = await self._get_session()
        async with session.get(f"{self.base_url}{path}", params=params) as response:
            self.rate_limiter.update_from_headers(response.headers)
            if response.status != 200:
                raise UpstreamError(f"HTTP {response.status}")
            return await response.json(content_type=None)

    async def _safe_request(self, path: str, params: Dict[str, str]) -> Union[Any, UpstreamFailed]:
        """请求上游，把传输层失败转换为 UpstreamFailed"""
        try:
            return await self._request_json(path, params)
        except UpstreamError as e:
            return UpstreamFailed(reason=str(e))
        except asyncio.TimeoutError:
            return UpstreamFailed(reason=f"timeout after {self.timeout}s")
        except (aiohttp.ClientError, ValueError) as e:
            logger.debug(f"{self.name} 请求异常: {e!r}")
            return UpstreamFailed(reason=f"{type(e).__name__}: {e}")
