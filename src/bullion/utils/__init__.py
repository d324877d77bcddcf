"""
通用工具模块
"""

from bullion.utils.config import Config, get_config, load_config, reset_config, set_config
from bullion.utils.logger import setup_logger

__all__ = [
    "Config",
    "get_config",
    "load_config",
    "reset_config",
    "set_config",
    "setup_logger",
]
