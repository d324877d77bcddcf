"""
配置管理模块
统一管理上游数据源、缓存与日志配置
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv


@dataclass
class MetalsApiConfig:
    """Metals-API 配置"""
    api_key: str = ""
    base_url: str = "https://metals-api.com/api"
    timeout: float = 8.0


@dataclass
class CoinGeckoConfig:
    """CoinGecko 配置（默认关闭，加密货币走兜底报价）"""
    enabled: bool = False
    api_key: str = ""
    base_url: str = "https://api.coingecko.com/api/v3"
    timeout: float = 8.0


@dataclass
class CacheConfig:
    """缓存配置"""
    ttl_seconds: int = 300


@dataclass
class LoggingConfig:
    """日志配置"""
    level: str = "INFO"
    file: str = ""
    rotation: str = "10 MB"
    retention: str = "1 week"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes")


@dataclass
class Config:
    """
    系统配置

    优先级：环境变量 > 配置文件 > 默认值
    """
    metals_api: MetalsApiConfig = field(default_factory=MetalsApiConfig)
    coingecko: CoinGeckoConfig = field(default_factory=CoinGeckoConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """从环境变量加载配置"""
        self.apply_env()

    def apply_env(self) -> None:
        """用环境变量覆盖当前值"""
        # Metals-API
        self.metals_api.api_key = os.getenv("METALS_API_KEY", self.metals_api.api_key)
        self.metals_api.base_url = os.getenv("METALS_API_BASE_URL", self.metals_api.base_url)
        self.metals_api.timeout = float(os.getenv("METALS_API_TIMEOUT", str(self.metals_api.timeout)))

        # CoinGecko
        self.coingecko.enabled = _env_bool("COINGECKO_ENABLED", self.coingecko.enabled)
        self.coingecko.api_key = os.getenv("COINGECKO_API_KEY", self.coingecko.api_key)
        self.coingecko.base_url = os.getenv("COINGECKO_BASE_URL", self.coingecko.base_url)

        # 缓存
        self.cache.ttl_seconds = int(os.getenv("PRICE_CACHE_TTL", str(self.cache.ttl_seconds)))

        # 日志
        self.logging.level = os.getenv("LOG_LEVEL", self.logging.level)
        self.logging.file = os.getenv("LOG_FILE", self.logging.file)

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """
        从 YAML 文件加载配置

        Args:
            path: 配置文件路径

        Returns:
            Config 对象
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """
        从字典加载配置，之后再应用环境变量覆盖

        Args:
            data: 配置字典

        Returns:
            Config 对象
        """
        config = cls()

        sections = {
            "metals_api": config.metals_api,
            "coingecko": config.coingecko,
            "cache": config.cache,
            "logging": config.logging,
        }
        for name, section in sections.items():
            for key, value in (data.get(name) or {}).items():
                if hasattr(section, key):
                    setattr(section, key, value)

        config.apply_env()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（密钥脱敏）"""
        return {
            "metals_api": {
                "api_key": "***" if self.metals_api.api_key else "",
                "base_url": self.metals_api.base_url,
                "timeout": self.metals_api.timeout,
            },
            "coingecko": {
                "enabled": self.coingecko.enabled,
                "api_key": "***" if self.coingecko.api_key else "",
                "base_url": self.coingecko.base_url,
                "timeout": self.coingecko.timeout,
            },
            "cache": {
                "ttl_seconds": self.cache.ttl_seconds,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
                "rotation": self.logging.rotation,
                "retention": self.logging.retention,
            },
        }


def load_config(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
) -> Config:
    """
    加载配置

    Args:
        config_path: YAML 配置文件路径
        env_file: .env 文件路径

    Returns:
        Config 对象
    """
    # 加载 .env 文件，不覆盖已有环境变量
    if env_file:
        load_dotenv(env_file, override=False)
    else:
        default_env = Path(".env")
        if default_env.exists():
            load_dotenv(default_env, override=False)

    if config_path and Path(config_path).exists():
        return Config.from_yaml(config_path)
    return Config()


# 全局配置实例
_global_config: Optional[Config] = None


def get_config() -> Config:
    """获取全局配置"""
    global _global_config
    if _global_config is None:
        _global_config = load_config(os.getenv("BULLION_CONFIG"))
    return _global_config


def set_config(config: Config) -> None:
    """设置全局配置"""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """重置全局配置，下次 get_config 时重新加载"""
    global _global_config
    _global_config = None
