"""
配置加载测试
"""

import pytest

from bullion.utils.config import Config, get_config, load_config, set_config
from bullion.web.app import build_price_services
from bullion.web.config import WebConfig


class TestConfig:

    def test_defaults(self):
        config = Config()
        assert config.metals_api.api_key == ""
        assert config.coingecko.enabled is False
        assert config.cache.ttl_seconds == 300
        assert config.logging.level == "INFO"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("METALS_API_KEY", "env-key")
        monkeypatch.setenv("PRICE_CACHE_TTL", "60")
        monkeypatch.setenv("COINGECKO_ENABLED", "true")

        config = Config()
        assert config.metals_api.api_key == "env-key"
        assert config.cache.ttl_seconds == 60
        assert config.coingecko.enabled is True

    def test_from_dict_then_env(self, monkeypatch):
        monkeypatch.setenv("PRICE_CACHE_TTL", "120")
        config = Config.from_dict({
            "metals_api": {"api_key": "file-key", "timeout": 3},
            "cache": {"ttl_seconds": 30},
            "unknown_section": {"x": 1},
        })
        assert config.metals_api.api_key == "file-key"
        assert config.metals_api.timeout == 3
        # 环境变量优先于配置文件
        assert config.cache.ttl_seconds == 120

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("cache:\n  ttl_seconds: 45\nlogging:\n  level: DEBUG\n", encoding="utf-8")

        config = load_config(str(path))
        assert config.cache.ttl_seconds == 45
        assert config.logging.level == "DEBUG"

    def test_missing_yaml_uses_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"))
        assert config.cache.ttl_seconds == 300

    def test_to_dict_masks_secrets(self):
        config = Config.from_dict({"metals_api": {"api_key": "secret"}})
        data = config.to_dict()
        assert data["metals_api"]["api_key"] == "***"
        assert data["coingecko"]["api_key"] == ""

    def test_global_config(self):
        config = Config.from_dict({"cache": {"ttl_seconds": 10}})
        set_config(config)
        assert get_config() is config


class TestWebConfig:

    def test_admin_token_from_env(self, monkeypatch):
        monkeypatch.setenv("PRICE_ADMIN_TOKEN", "tok")
        monkeypatch.setenv("WEB_PORT", "9000")
        config = WebConfig.from_env()
        assert config.admin_token == "tok"
        assert config.port == 9000


class TestBuildServices:

    @pytest.mark.parametrize("key", ["", "your_metals_api_key_here"])
    def test_placeholder_key_means_fallback(self, key):
        config = Config.from_dict({"metals_api": {"api_key": key}})
        services = build_price_services(config)
        assert services["metals"].provider is None

    def test_real_key_enables_metals_api(self):
        config = Config.from_dict({"metals_api": {"api_key": "real-key"}})
        services = build_price_services(config)
        assert services["metals"].provider.name == "metals-api"
        assert services["crypto"].provider is None

    def test_coingecko_enabled(self):
        config = Config.from_dict({"coingecko": {"enabled": True}})
        services = build_price_services(config)
        assert services["crypto"].provider.name == "coingecko"

    def test_ttl_applied(self):
        config = Config.from_dict({"cache": {"ttl_seconds": 42}})
        services = build_price_services(config)
        assert services["metals"].cache.ttl_seconds == 42
