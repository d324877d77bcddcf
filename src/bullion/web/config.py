"""
Web 模块配置
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _load_dotenv():
    """主动加载当前目录下的 .env，不覆盖已有环境变量"""
    path = Path.cwd() / ".env"
    if path.is_file():
        load_dotenv(dotenv_path=path, override=False)


@dataclass
class WebConfig:
    """Web 服务配置"""
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    ssl_keyfile: str = ""
    ssl_certfile: str = ""
    admin_token: str = ""

    def __post_init__(self):
        """从环境变量加载配置（先确保 .env 已加载）"""
        _load_dotenv()
        self.host = os.getenv("WEB_HOST", self.host)
        self.port = int(os.getenv("WEB_PORT", str(self.port)))
        self.debug = os.getenv("WEB_DEBUG", "false").lower() == "true"
        self.ssl_keyfile = os.getenv("SSL_KEYFILE", self.ssl_keyfile)
        self.ssl_certfile = os.getenv("SSL_CERTFILE", self.ssl_certfile)
        self.admin_token = os.getenv("PRICE_ADMIN_TOKEN", self.admin_token)

    @classmethod
    def from_env(cls) -> "WebConfig":
        """从环境变量创建配置"""
        return cls()
