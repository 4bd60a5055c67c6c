"""排序管理模块

在分组（分区）内维护稠密、连续的整数序号：
- SequenceEngine: 分配、删除压缩、上移/下移、移动到任意位置
- SequenceMixin / SequenceFieldMixin: 模型上的排序方法与标准序号字段
- 生命周期钩子: flush 时自动分配与压缩

使用示例:
    from yseq.orm.sequence import SequenceFieldMixin, SequenceMixin, activate_sequence_hooks

    class Product(BaseModel, SequenceFieldMixin, SequenceMixin):
        __tablename__ = "product"
        __sequence__ = {"group": "category_id"}
        category_id: Mapped[int] = mapped_column(Integer)

    activate_sequence_hooks()
"""

from .exceptions import (
    SequenceError,
    ConfigurationKeyError,
    NotFoundError,
    InvalidPositionError,
    SequenceNotRegisteredError,
)
from .options import (
    DEFAULT_OPTIONS,
    OPTION_ALIASES,
    SequenceConfig,
    normalize_group,
    normalize_option_key,
)
from .accessor import SequenceAttributeAccessor, is_assigned_value
from .store import Condition, RecordStore, SQLAlchemyRecordStore
from .registry import (
    SequenceBinding,
    SequenceRegistry,
    sequence_registry,
    register_sequence,
    sequence,
    configure_sequence_defaults,
)
from .engine import SequenceEngine, sequence_engine
from .mixin import SequenceFieldMixin, SequenceMixin
from .hooks import (
    activate_sequence_hooks,
    deactivate_sequence_hooks,
    is_sequence_hooks_active,
)

__all__ = [
    # 异常
    "SequenceError",
    "ConfigurationKeyError",
    "NotFoundError",
    "InvalidPositionError",
    "SequenceNotRegisteredError",
    # 配置
    "DEFAULT_OPTIONS",
    "OPTION_ALIASES",
    "SequenceConfig",
    "normalize_group",
    "normalize_option_key",
    # 访问与存储
    "SequenceAttributeAccessor",
    "is_assigned_value",
    "Condition",
    "RecordStore",
    "SQLAlchemyRecordStore",
    # 注册
    "SequenceBinding",
    "SequenceRegistry",
    "sequence_registry",
    "register_sequence",
    "sequence",
    "configure_sequence_defaults",
    # 引擎
    "SequenceEngine",
    "sequence_engine",
    # Mixin
    "SequenceFieldMixin",
    "SequenceMixin",
    # 钩子
    "activate_sequence_hooks",
    "deactivate_sequence_hooks",
    "is_sequence_hooks_active",
]
