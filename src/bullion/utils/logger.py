"""
日志模块

按 LoggingConfig 配置 loguru：控制台输出带颜色，文件输出按大小轮转。
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from bullion.utils.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logger(config: LoggingConfig, level: Optional[str] = None) -> None:
    """
    配置日志系统

    异常回溯不输出局部变量（diagnose=False），请求参数里的 API key 不会落盘。

    Args:
        config: 日志配置段
        level: 覆盖配置中的级别，命令行一次性查询时用于压低输出
    """
    level = (level or config.level).upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True, diagnose=False)

    if config.file:
        Path(config.file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            config.file,
            level=level,
            format=FILE_FORMAT,
            rotation=config.rotation,
            retention=config.retention,
            compression="zip",
            encoding="utf-8",
            diagnose=False,
        )

    logger.debug(f"日志系统初始化完成，级别: {level}，文件: {config.file or '-'}")
