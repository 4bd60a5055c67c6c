"""
YSeq - 关系型记录的分组排序库

在每个分组内维护从 1 开始、连续无间隙的整数序号，提供分配、删除压缩、
上移/下移与移动到任意位置等操作
"""

from .version import __version__, __author__, __description__

# 导出ORM与排序
from .orm import (
    BaseModel,
    CoreModel,
    init_database,
    get_engine,
    get_session,
    db_session_scope,
    transaction_manager,
    SequenceEngine,
    sequence_engine,
    SequenceFieldMixin,
    SequenceMixin,
    register_sequence,
    sequence,
    configure_sequence_defaults,
    activate_sequence_hooks,
    deactivate_sequence_hooks,
    ConfigurationKeyError,
    NotFoundError,
    InvalidPositionError,
)

# 导出配置
from .config import (
    AppSettings,
    SequenceSettings,
    load_yaml_config,
)

# 导出日志
from .log import setup_logger, setup_root_logger, get_logger

# 导出异常
from .exceptions import BusinessException, ErrorCode

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "BaseModel",
    "CoreModel",
    "init_database",
    "get_engine",
    "get_session",
    "db_session_scope",
    "transaction_manager",
    "SequenceEngine",
    "sequence_engine",
    "SequenceFieldMixin",
    "SequenceMixin",
    "register_sequence",
    "sequence",
    "configure_sequence_defaults",
    "activate_sequence_hooks",
    "deactivate_sequence_hooks",
    "ConfigurationKeyError",
    "NotFoundError",
    "InvalidPositionError",
    "AppSettings",
    "SequenceSettings",
    "load_yaml_config",
    "setup_logger",
    "setup_root_logger",
    "get_logger",
    "BusinessException",
    "ErrorCode",
]
