"""
贵金属与加密货币报价服务

模块:
- data: 品种目录、缓存、兜底数据合成、上游报价
- web: FastAPI 服务与报价缓存服务层
- utils: 配置与日志
"""

__version__ = "0.1.0"
