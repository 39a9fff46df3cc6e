# -*- coding: utf-8 -*-
from __future__ import annotations
import os
import sys
from typing import Optional
from loguru import logger
from pathlib import Path


LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LEVEL = "WARNING"


def _normalize_level(level: Optional[str]) -> str:
    """标准化日志级别（内部辅助），无法识别的级别回退到 WARNING"""
    normalized = (level or DEFAULT_LEVEL).strip().upper()
    if normalized not in LOG_LEVELS:
        return DEFAULT_LEVEL
    return normalized


def _resolve_logs_dir() -> Path:
    """日志目录：优先使用环境变量，其次使用用户目录"""
    logs_dir = os.getenv("SHARPENER_LOGS_DIR")
    if logs_dir:
        return Path(logs_dir)
    return Path.home() / ".sharpener" / "logs"


def configure_logger(level: str = "WARNING", file_level: str = "DEBUG"):
    """配置日志

    控制台只输出 level 及以上的日志（写到 stderr，避免混入测试输出），
    完整的调试日志写入滚动日志文件。
    """
    logger.remove()
    normalized_level = _normalize_level(level)
    logger.add(lambda m: print(m, end="", file=sys.stderr), level=normalized_level, format="{level: <8} {message}")
    if level and level.strip().upper() != normalized_level:
        logger.warning(f"未知的日志级别 {level!r}，使用 {normalized_level}")

    logs_path = _resolve_logs_dir()
    try:
        logs_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"无法创建日志目录 {logs_path}: {e}")
        return logger
    log_file = logs_path / "sharpener.log"
    logger.add(str(log_file), rotation="5 MB", retention=5, encoding="utf-8", level=_normalize_level(file_level))
    return logger
