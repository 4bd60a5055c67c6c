"""事务状态与传播行为"""

from enum import Enum


class TransactionState(str, Enum):
    """排序事务所处的阶段

    INACTIVE -> ACTIVE -> COMMITTED / ROLLED_BACK，提交或回滚出错时为 FAILED
    """

    INACTIVE = "inactive"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"


class TransactionPropagation(str, Enum):
    """在已有事务中再次进入 transaction() 时的行为

    使用示例:
        with tm.transaction(propagation=TransactionPropagation.MANDATORY):
            sequence_engine.move_to(banner, 0)
    """

    REQUIRED = "required"
    """有外层事务时加入，没有时新建。排序引擎的每个写操作都使用它"""

    MANDATORY = "mandatory"
    """只能加入外层事务，单独调用时抛出 PropagationError"""


__all__ = [
    "TransactionState",
    "TransactionPropagation",
]
