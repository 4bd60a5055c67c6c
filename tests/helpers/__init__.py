"""测试辅助工具模块

提供测试专用的辅助函数，避免在核心代码中添加测试专用方法。
"""

from .transaction_helpers import (
    reset_transaction_manager,
)
from .sql_helpers import (
    SqlCounter,
    count_sql,
)
from .memory_store import MemoryRecordStore

__all__ = [
    # 事务管理器辅助
    'reset_transaction_manager',
    # SQL 统计
    'SqlCounter',
    'count_sql',
    # 内存存储
    'MemoryRecordStore',
]
