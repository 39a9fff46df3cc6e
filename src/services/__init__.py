# -*- coding: utf-8 -*-
"""
Sharpener Services Layer

服务层统一导出模块，命令行通过这里构建已装配好的编排器。
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .config_service import AppConfig
    from .lifecycle import LifecycleOrchestrator
    from .submission_client import SubmissionClient


def create_client(app_config: 'AppConfig') -> 'SubmissionClient':
    """读取用户配置并创建已认证的提交客户端"""
    from .config_service import UserConfig
    from .submission_client import SubmissionClient

    user_config = UserConfig.load(app_config.config_path)
    return SubmissionClient(app_config.api_url, user_config.token, timeout=app_config.request_timeout)


def create_orchestrator(
    app_config: Optional['AppConfig'] = None,
    authenticated: bool = True,
) -> 'LifecycleOrchestrator':
    """创建生命周期编排器

    Args:
        app_config: 运行配置，默认从环境变量读取
        authenticated: 为 False 时不读取用户配置（test / hint 不需要访问服务器）
    """
    from .archive_installer import ArchiveInstaller
    from .config_service import get_app_config
    from .lifecycle import LifecycleOrchestrator

    app_config = app_config or get_app_config()
    client = create_client(app_config) if authenticated else None
    installer = ArchiveInstaller(app_config.bucket_url, timeout=app_config.request_timeout)
    return LifecycleOrchestrator(client=client, installer=installer)


__all__ = [
    'create_client',
    'create_orchestrator',
]
