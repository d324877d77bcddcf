"""
FastAPI 应用实例
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from bullion.data.cache import MemoryCache
from bullion.data.catalog import InstrumentCatalog, crypto_catalog, metals_catalog
from bullion.data.providers import CoinGeckoProvider, MetalsApiProvider, is_usable_key
from bullion.utils.config import Config, get_config
from bullion.web.config import WebConfig
from bullion.web.services.price_service import PriceCacheService


def _build_service(
    catalog: InstrumentCatalog,
    provider,
    ttl_seconds: int,
) -> PriceCacheService:
    return PriceCacheService(
        catalog=catalog,
        provider=provider,
        cache=MemoryCache(ttl=timedelta(seconds=ttl_seconds)),
    )


def build_price_services(config: Config) -> Dict[str, PriceCacheService]:
    """
    按配置构建各市场的报价服务

    未配置（或配置为占位值）的 key 会让对应市场进入纯兜底模式。
    """
    metals_provider = None
    if is_usable_key(config.metals_api.api_key):
        metals_provider = MetalsApiProvider(
            api_key=config.metals_api.api_key,
            base_url=config.metals_api.base_url,
            timeout=config.metals_api.timeout,
        )

    crypto_provider = None
    if config.coingecko.enabled:
        crypto_provider = CoinGeckoProvider(
            api_key=config.coingecko.api_key,
            base_url=config.coingecko.base_url,
            timeout=config.coingecko.timeout,
        )

    ttl = config.cache.ttl_seconds
    return {
        "metals": _build_service(metals_catalog(), metals_provider, ttl),
        "crypto": _build_service(crypto_catalog(), crypto_provider, ttl),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    yield

    # 关闭上游 HTTP 会话
    for service in app.state.price_services.values():
        await service.close()


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求参数不合法统一返回 400"""
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app(
    config: Optional[Config] = None,
    web_config: Optional[WebConfig] = None,
    price_services: Optional[Dict[str, PriceCacheService]] = None,
) -> FastAPI:
    """
    创建 FastAPI 应用

    Args:
        config: 系统配置，默认使用全局配置
        web_config: Web 配置，默认从环境变量加载
        price_services: 预先构建的报价服务（测试时注入）
    """
    config = config or get_config()
    web_config = web_config or WebConfig()

    app = FastAPI(
        title="Bullion Price Feed",
        description="贵金属与加密货币报价缓存服务",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.config = web_config
    app.state.price_services = price_services if price_services is not None else build_price_services(config)

    if not web_config.admin_token:
        logger.warning("未设置 PRICE_ADMIN_TOKEN，缓存管理接口未受保护")

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # 注册路由
    from bullion.web.routes import cache, health, market

    app.include_router(health.router, tags=["Health"])
    app.include_router(market.router, prefix="/api/{market}", tags=["Market"])
    app.include_router(cache.router, prefix="/api/{market}", tags=["Cache"])

    return app
