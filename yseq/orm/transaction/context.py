"""事务上下文

一个 TransactionContext 对应最外层的一次 transaction() 调用。
加入它的内层作用域不会再提交，由它在退出时统一提交或回滚。
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, TYPE_CHECKING

from sqlalchemy.orm import Session

from yseq.log import get_logger

from .state import TransactionState
from .exceptions import TransactionStateError

if TYPE_CHECKING:
    from sqlalchemy.orm import SessionTransaction

logger = get_logger("yseq.orm.transaction")


class TransactionContext:
    """事务上下文

    Args:
        session: 数据库会话
        auto_commit: 正常退出时是否提交
        suppress_commit: 事务内 save(commit=True) 是否只 flush 不提交

    使用示例:
        with TransactionContext(session) as tx:
            sequence_engine.move_up(item)
            with tx.savepoint():
                sequence_engine.move_to(other, 0)
    """

    def __init__(self, session: Session, auto_commit: bool = True, suppress_commit: bool = True):
        self._session = session
        self._auto_commit = auto_commit
        self._suppress_commit = suppress_commit
        self._state = TransactionState.INACTIVE
        self._savepoints = 0

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == TransactionState.ACTIVE

    def should_suppress_commit(self) -> bool:
        """CoreModel.save(commit=True) 据此决定只 flush"""
        return self.is_active and self._suppress_commit

    # ==================== 生命周期 ====================

    def begin(self) -> TransactionContext:
        if self._state != TransactionState.INACTIVE:
            raise TransactionStateError(f"事务已处于 {self._state.value} 状态", self._state)
        # session 自动开始数据库事务，这里只切换状态
        self._state = TransactionState.ACTIVE
        logger.debug("事务开始")
        return self

    def commit(self) -> None:
        if not self.is_active:
            raise TransactionStateError(f"无法提交：事务状态为 {self._state.value}", self._state)
        try:
            self._session.commit()
        except Exception:
            self._state = TransactionState.FAILED
            raise
        self._state = TransactionState.COMMITTED
        logger.debug("事务已提交")

    def rollback(self) -> None:
        """回滚，重复调用无副作用"""
        if self._state == TransactionState.COMMITTED:
            raise TransactionStateError("无法回滚：事务已提交", self._state)
        if self._state not in (TransactionState.ACTIVE, TransactionState.FAILED):
            return
        try:
            self._session.rollback()
        except Exception as e:
            self._state = TransactionState.FAILED
            logger.error(f"事务回滚失败: {e}")
            raise
        self._state = TransactionState.ROLLED_BACK
        logger.debug("事务已回滚")

    # ==================== 保存点 ====================

    @contextmanager
    def savepoint(self) -> Generator[SessionTransaction, None, None]:
        """保存点：块内抛出异常时只撤销块内的排序修改，外层事务继续

        使用示例:
            with tm.transaction() as tx:
                sequence_engine.move_to_top(a)
                try:
                    with tx.savepoint():
                        sequence_engine.move_to_bottom(b)
                        check_quota()
                except QuotaError:
                    pass
            # a 的移动被提交，b 的移动被撤销
        """
        if not self.is_active:
            raise TransactionStateError("无法创建保存点：事务未激活", self._state)

        self._savepoints += 1
        name = f"sp_{self._savepoints}"
        nested = self._session.begin_nested()
        logger.debug(f"创建保存点 {name}")
        try:
            yield nested
        except Exception:
            if nested.is_active:
                nested.rollback()
            logger.debug(f"保存点 {name} 已回滚")
            raise
        if nested.is_active:
            nested.commit()

    # ==================== 上下文管理器 ====================

    def __enter__(self) -> TransactionContext:
        return self.begin()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
            return False
        if self._auto_commit and self.is_active:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        return False

    def __repr__(self) -> str:
        return f"TransactionContext(state={self._state.value}, savepoints={self._savepoints})"


__all__ = [
    "TransactionContext",
]
