"""Podman推送管理器模块

该模块包含推送流程中的各个管理器类。推送相关的管理器依赖顶层的工具函数，
请直接从子模块导入，例如 `podpush.managers.push_manager`。
"""

from .config_manager import ConfigError, ConfigManager

__all__ = [
    "ConfigManager",
    "ConfigError",
]
