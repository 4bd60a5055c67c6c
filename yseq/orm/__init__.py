"""ORM模块

提供排序功能依赖的 ORM 基础：
- CoreModel / BaseModel: 模型基类，包含ID、时间戳、CRUD
- 数据库会话管理
- 事务管理
- 排序管理（分区内稠密序号）

使用示例:
    from yseq.orm import BaseModel, init_database, SequenceFieldMixin, SequenceMixin

    init_database("sqlite:///./app.db")

    class Banner(BaseModel, SequenceFieldMixin, SequenceMixin):
        __tablename__ = "banner"
        title: Mapped[str] = mapped_column(String(100))

    banner = Banner.get(1)
    banner.move_to_top()
"""

from .id_model import IdModel, Base
from .core_model import CoreModel, BaseModel
from .db_session import (
    # 管理器单例
    db_manager,
    # 公开 API
    init_database,
    get_engine,
    get_session,
    db_session_scope,
)

# 事务管理
from .transaction import (
    # 状态
    TransactionState,

    # 异常
    TransactionError,
    TransactionStateError,
    PropagationError,

    # 传播行为
    TransactionPropagation,

    # 上下文
    TransactionContext,

    # 管理器
    TransactionManager,
    transaction_manager,
    get_current_transaction,
)

# 排序管理
from .sequence import (
    SequenceError,
    ConfigurationKeyError,
    NotFoundError,
    InvalidPositionError,
    SequenceNotRegisteredError,
    SequenceConfig,
    SequenceAttributeAccessor,
    Condition,
    RecordStore,
    SQLAlchemyRecordStore,
    SequenceBinding,
    SequenceRegistry,
    sequence_registry,
    register_sequence,
    sequence,
    configure_sequence_defaults,
    SequenceEngine,
    sequence_engine,
    SequenceFieldMixin,
    SequenceMixin,
    activate_sequence_hooks,
    deactivate_sequence_hooks,
    is_sequence_hooks_active,
)

__all__ = [
    # 模型基类
    "Base",
    "IdModel",
    "CoreModel",
    "BaseModel",
    # 会话
    "db_manager",
    "init_database",
    "get_engine",
    "get_session",
    "db_session_scope",
    # 事务
    "TransactionState",
    "TransactionError",
    "TransactionStateError",
    "PropagationError",
    "TransactionPropagation",
    "TransactionContext",
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
    # 排序
    "SequenceError",
    "ConfigurationKeyError",
    "NotFoundError",
    "InvalidPositionError",
    "SequenceNotRegisteredError",
    "SequenceConfig",
    "SequenceAttributeAccessor",
    "Condition",
    "RecordStore",
    "SQLAlchemyRecordStore",
    "SequenceBinding",
    "SequenceRegistry",
    "sequence_registry",
    "register_sequence",
    "sequence",
    "configure_sequence_defaults",
    "SequenceEngine",
    "sequence_engine",
    "SequenceFieldMixin",
    "SequenceMixin",
    "activate_sequence_hooks",
    "deactivate_sequence_hooks",
    "is_sequence_hooks_active",
]
