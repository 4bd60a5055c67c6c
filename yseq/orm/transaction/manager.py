"""事务管理器

排序引擎的每个写操作都通过 transaction_manager.transaction() 获得事务作用域：
单独调用时自行提交，在业务事务中调用时加入外层事务。
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from functools import wraps
from typing import Callable, Generator, Optional, TypeVar

from sqlalchemy.orm import Session

from yseq.log import get_logger

from .state import TransactionPropagation
from .context import TransactionContext
from .exceptions import PropagationError

logger = get_logger("yseq.orm.transaction")

T = TypeVar('T')

# 当前最外层事务（线程/协程隔离）
_current_transaction: ContextVar[Optional[TransactionContext]] = ContextVar(
    '_current_transaction', default=None
)


def get_current_transaction() -> Optional[TransactionContext]:
    """当前活跃的事务上下文，不在事务中时返回 None"""
    tx = _current_transaction.get()
    if tx is not None and tx.is_active:
        return tx
    return None


class TransactionManager:
    """事务管理器（单例）

    使用示例:
        from yseq.orm import transaction_manager as tm

        with tm.transaction() as tx:
            sequence_engine.move_to(banner, 0)
            sequence_engine.move_down(other)
        # 两次移动一起提交

        @tm.transactional()
        def pin(items):
            for item in reversed(items):
                sequence_engine.move_to_top(item)
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self.suppress_commit = True
        self._initialized = True

    def get_session(self) -> Session:
        from ..db_session import db_manager
        return db_manager.get_session()

    @property
    def current_transaction(self) -> Optional[TransactionContext]:
        return get_current_transaction()

    def is_in_transaction(self) -> bool:
        return self.current_transaction is not None

    @contextmanager
    def transaction(
        self,
        session: Session = None,
        propagation: TransactionPropagation = TransactionPropagation.REQUIRED,
        auto_commit: bool = True,
        suppress_commit: bool = None,
    ) -> Generator[TransactionContext, None, None]:
        """进入事务作用域

        Args:
            session: 数据库会话，不传时使用全局 session
            propagation: 已有事务时的行为
            auto_commit: 新建的事务正常退出时是否提交
            suppress_commit: 事务内是否抑制 save(commit=True)，None 使用管理器配置

        注意:
            加入外层事务时，内层的异常应继续向外抛出，由最外层回滚。
        """
        current = self.current_transaction

        if current is not None:
            logger.debug(f"{propagation.name}: 加入现有事务")
            yield current
            return

        if propagation == TransactionPropagation.MANDATORY:
            raise PropagationError("MANDATORY", "必须在事务中执行")

        if session is None:
            session = self.get_session()
        if suppress_commit is None:
            suppress_commit = self.suppress_commit

        ctx = TransactionContext(session, auto_commit=auto_commit, suppress_commit=suppress_commit)
        token = _current_transaction.set(ctx)
        try:
            with ctx:
                yield ctx
        finally:
            _current_transaction.reset(token)

    def transactional(
        self,
        propagation: TransactionPropagation = TransactionPropagation.REQUIRED,
        suppress_commit: bool = None,
    ):
        """事务装饰器"""
        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            @wraps(func)
            def wrapper(*args, **kwargs) -> T:
                with self.transaction(propagation=propagation, suppress_commit=suppress_commit):
                    return func(*args, **kwargs)
            return wrapper
        return decorator


# 全局单例
transaction_manager = TransactionManager()


__all__ = [
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
]
