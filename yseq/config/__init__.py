"""配置模块

提供配置管理功能：
- AppSettings: 应用基础配置，支持 YAML + 环境变量
- 子配置类: DatabaseSettings, LoggingSettings, SequenceSettings
- ConfigLoader: YAML 配置加载器

快速开始:
    from yseq.config import load_yaml_config

    settings = load_yaml_config("config/settings.yaml")
"""

from .settings import (
    AppSettings,
    DatabaseSettings,
    LoggingSettings,
    SequenceSettings,
)

from .loader import (
    ConfigLoader,
    load_yaml_config,
)

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "SequenceSettings",
    "ConfigLoader",
    "load_yaml_config",
]
