# -*- coding: utf-8 -*-
"""
配置服务单元测试

测试 AppConfig（环境变量）和 UserConfig（~/.sharpener-config）
"""

import json
import sys
from pathlib import Path

# 添加src到路径
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import pytest

from core.exceptions import ConfigNotFoundError, ConfigParseError
from services.config_service import (
    DEFAULT_API_URL,
    DEFAULT_BUCKET_URL,
    AppConfig,
    UserConfig,
    get_app_config,
)


class TestAppConfig:
    """AppConfig 测试类"""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for name in ("SHARPENER_API_URL", "SHARPENER_BUCKET_URL", "SHARPENER_TIMEOUT",
                     "SHARPENER_LOG_LEVEL", "SHARPENER_CONFIG"):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        cfg = get_app_config()
        assert cfg.api_url == DEFAULT_API_URL
        assert cfg.bucket_url == DEFAULT_BUCKET_URL
        assert cfg.request_timeout == 30.0
        assert cfg.config_path == Path.home() / ".sharpener-config"

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SHARPENER_API_URL", "https://api.sharpener.test/")
        monkeypatch.setenv("SHARPENER_TIMEOUT", "2.5")
        monkeypatch.setenv("SHARPENER_CONFIG", str(tmp_path / "cfg.json"))
        cfg = AppConfig.from_env()
        assert cfg.api_url == "https://api.sharpener.test/"
        assert cfg.request_timeout == 2.5
        assert cfg.config_path == tmp_path / "cfg.json"

    def test_invalid_timeout_falls_back(self, monkeypatch):
        monkeypatch.setenv("SHARPENER_TIMEOUT", "soon")
        assert AppConfig.from_env().request_timeout == 30.0

    @pytest.mark.parametrize("raw", ["0", "-5", "inf", "nan"])
    def test_non_positive_or_infinite_timeout_falls_back(self, monkeypatch, raw):
        """requests 无法使用的超时值回退到默认值"""
        monkeypatch.setenv("SHARPENER_TIMEOUT", raw)
        assert AppConfig.from_env().request_timeout == 30.0


class TestUserConfig:
    """UserConfig 测试类"""

    def test_create_and_load(self, tmp_path):
        path = tmp_path / ".sharpener-config"
        UserConfig.create("my-token", path)

        assert json.loads(path.read_text(encoding="utf-8")) == {"token": "my-token"}
        assert UserConfig.load(path).token == "my-token"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigNotFoundError) as exc_info:
            UserConfig.load(tmp_path / "missing")
        assert "config" in exc_info.value.hint

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "cfg"
        path.write_text("token=abc", encoding="utf-8")
        with pytest.raises(ConfigParseError):
            UserConfig.load(path)

    def test_missing_token_field(self, tmp_path):
        path = tmp_path / "cfg"
        path.write_text(json.dumps({"user": "someone"}), encoding="utf-8")
        with pytest.raises(ConfigParseError):
            UserConfig.load(path)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
