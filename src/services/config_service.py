# -*- coding: utf-8 -*-
"""
配置服务

两类配置：
- AppConfig: 运行参数（API 地址、对象存储地址、超时、日志级别），来自环境变量
- UserConfig: 用户 CLI token，保存在 ~/.sharpener-config（JSON），
  由 `sharpener config` 写入，每次命令执行时重新读取

使用方式：
    from services.config_service import get_app_config, UserConfig

    app_cfg = get_app_config()
    user_cfg = UserConfig.load(app_cfg.config_path)
"""

from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from loguru import logger

from core.exceptions import ConfigNotFoundError, ConfigParseError, ConfigWriteError


DEFAULT_API_URL = "http://localhost:5000/api/"
DEFAULT_BUCKET_URL = "https://storage.googleapis.com/"
DEFAULT_CONFIG_FILENAME = ".sharpener-config"
DEFAULT_TIMEOUT = 30.0


def default_config_path() -> Path:
    """用户配置文件的默认路径"""
    return Path.home() / DEFAULT_CONFIG_FILENAME


@dataclass
class AppConfig:
    """运行配置"""
    api_url: str = DEFAULT_API_URL
    bucket_url: str = DEFAULT_BUCKET_URL
    request_timeout: float = DEFAULT_TIMEOUT
    log_level: str = "WARNING"
    config_path: Optional[Path] = None

    def __post_init__(self):
        if self.config_path is None:
            self.config_path = default_config_path()

    @classmethod
    def from_env(cls) -> "AppConfig":
        """从环境变量构建配置，未设置的项使用默认值"""
        timeout_raw = os.getenv("SHARPENER_TIMEOUT", "")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
        except ValueError:
            timeout = None
        # requests 不接受 0、负数和 inf/nan
        if timeout is None or not math.isfinite(timeout) or timeout <= 0:
            logger.warning(f"SHARPENER_TIMEOUT 无效: {timeout_raw!r}，使用默认值 {DEFAULT_TIMEOUT:g} 秒")
            timeout = DEFAULT_TIMEOUT

        config_path = os.getenv("SHARPENER_CONFIG")
        return cls(
            api_url=os.getenv("SHARPENER_API_URL", DEFAULT_API_URL),
            bucket_url=os.getenv("SHARPENER_BUCKET_URL", DEFAULT_BUCKET_URL),
            request_timeout=timeout,
            log_level=os.getenv("SHARPENER_LOG_LEVEL", "WARNING"),
            config_path=Path(config_path).expanduser() if config_path else None,
        )


def get_app_config() -> AppConfig:
    """获取运行配置（每次调用都重新读取环境变量）"""
    return AppConfig.from_env()


@dataclass
class UserConfig:
    """用户配置：只有 CLI token"""
    token: str

    @classmethod
    def create(cls, token: str, path: Optional[Path] = None) -> "UserConfig":
        """写入新的用户配置（覆盖旧文件）

        Args:
            token: CLI token
            path: 配置文件路径，默认 ~/.sharpener-config

        Returns:
            UserConfig 实例
        """
        path = Path(path) if path is not None else default_config_path()
        config = cls(token=token)
        try:
            path.write_text(json.dumps(asdict(config), ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigWriteError(path, str(e)) from e
        logger.debug(f"[配置] 已写入用户配置: {path}")
        return config

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "UserConfig":
        """读取用户配置

        Args:
            path: 配置文件路径，默认 ~/.sharpener-config

        Returns:
            UserConfig 实例

        Raises:
            ConfigNotFoundError: 文件不存在或无法读取
            ConfigParseError: 文件内容不是合法配置
        """
        path = Path(path) if path is not None else default_config_path()
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigNotFoundError(path, str(e)) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigParseError(str(e)) from e

        if not isinstance(data, dict) or not isinstance(data.get("token"), str):
            raise ConfigParseError("缺少字段 token")
        return cls(token=data["token"])
