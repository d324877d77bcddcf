"""
Web 模块
提供报价查询 API 服务
"""

from bullion.web.app import build_price_services, create_app
from bullion.web.config import WebConfig

__all__ = [
    "build_price_services",
    "create_app",
    "WebConfig",
]
