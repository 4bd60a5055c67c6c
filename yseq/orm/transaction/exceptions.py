"""事务异常"""


class TransactionError(Exception):
    """事务错误基类"""
    pass


class TransactionStateError(TransactionError):
    """在不允许的状态下提交、回滚或创建保存点"""

    def __init__(self, message: str, state=None):
        self.state = state
        super().__init__(message)


class PropagationError(TransactionError):
    """传播行为要求的外层事务不存在"""

    def __init__(self, propagation: str, message: str):
        self.propagation = propagation
        super().__init__(f"[{propagation}] {message}")


__all__ = [
    "TransactionError",
    "TransactionStateError",
    "PropagationError",
]
