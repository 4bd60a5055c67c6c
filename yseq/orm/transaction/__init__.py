"""事务管理模块

为排序操作提供事务作用域：
- REQUIRED / MANDATORY 传播行为
- 保存点
- 事务内 save(commit=True) 只 flush 不提交

使用示例:
    from yseq.orm import transaction_manager as tm

    with tm.transaction() as tx:
        sequence_engine.move_to(item, 0)

        with tx.savepoint():
            sequence_engine.move_down(other)
"""

from .state import TransactionState, TransactionPropagation
from .exceptions import (
    TransactionError,
    TransactionStateError,
    PropagationError,
)
from .context import TransactionContext
from .manager import (
    TransactionManager,
    transaction_manager,
    get_current_transaction,
)

__all__ = [
    "TransactionState",
    "TransactionPropagation",
    "TransactionError",
    "TransactionStateError",
    "PropagationError",
    "TransactionContext",
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
]
