"""记录存储抽象

排序引擎只通过 RecordStore 访问数据：最大值聚合、带条件的有序范围查询、
批量增减以及单条记录持久化。SQLAlchemyRecordStore 是基于 ORM Session 的实现。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, ClassVar, ContextManager, Iterable, List, Optional, Sequence, Type

from sqlalchemy import func, select, update, tuple_, inspect as sa_inspect
from sqlalchemy.orm import Session, object_session

from yseq.log import get_logger

from ..transaction import transaction_manager

logger = get_logger("yseq.orm.sequence")


@dataclass(frozen=True)
class Condition:
    """过滤条件：字段 比较符 值

    值为 None 的 == / != 条件转换为 IS NULL / IS NOT NULL。
    """
    field: str
    op: str
    value: Any

    OPERATORS: ClassVar[tuple] = ("==", "!=", "<", "<=", ">", ">=")

    def __post_init__(self):
        if self.op not in self.OPERATORS:
            raise ValueError(f"不支持的比较符: {self.op}")


class RecordStore(ABC):
    """记录存储接口"""

    @abstractmethod
    def persist(self, entity: Any) -> None:
        """把实体当前的字段值写入存储"""

    def persist_all(self, entities: Iterable[Any]) -> None:
        for entity in entities:
            self.persist(entity)

    @abstractmethod
    def max_of(
        self,
        model: Type,
        field: str,
        conditions: Sequence[Condition] = (),
        exclude: Sequence[Any] = (),
    ) -> Optional[int]:
        """过滤后字段的最大值，没有记录时返回 None"""

    @abstractmethod
    def range_query(
        self,
        model: Type,
        field: str,
        conditions: Sequence[Condition] = (),
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Any]:
        """按字段排序的范围查询"""

    def first(
        self,
        model: Type,
        field: str,
        conditions: Sequence[Condition] = (),
        descending: bool = False,
    ) -> Optional[Any]:
        rows = self.range_query(model, field, conditions, descending=descending, limit=1)
        return rows[0] if rows else None

    @abstractmethod
    def bulk_increment(
        self,
        model: Type,
        field: str,
        conditions: Sequence[Condition] = (),
        delta: int = 1,
    ) -> int:
        """对过滤后的记录批量增加，返回影响行数"""

    def bulk_decrement(
        self,
        model: Type,
        field: str,
        conditions: Sequence[Condition] = (),
        delta: int = 1,
    ) -> int:
        return self.bulk_increment(model, field, conditions, delta=-delta)

    def transaction(self) -> ContextManager:
        """事务作用域，默认不做任何事"""
        return nullcontext()


class SQLAlchemyRecordStore(RecordStore):
    """基于 SQLAlchemy Session 的记录存储

    - 查询都在 no_autoflush 下执行，只看到已持久化的数据
    - 批量增减使用一条 ORM UPDATE 语句，并同步 session 中已加载的对象
    - transaction() 使用 transaction_manager，已在事务中时加入外层事务

    使用示例:
        store = SQLAlchemyRecordStore(session)
        store.max_of(Banner, "seq")
        store.bulk_decrement(Banner, "seq", [Condition("seq", ">", 3)])
    """

    def __init__(self, session: Session):
        self._session = session

    @classmethod
    def from_model(cls, model: Type) -> "SQLAlchemyRecordStore":
        """从模型的 query 属性获取 session，没有时使用全局 session"""
        query = getattr(model, "query", None)
        if query is not None:
            return cls(query.session)
        from ..db_session import db_manager
        return cls(db_manager.get_session())

    @classmethod
    def from_entity(cls, entity: Any) -> "SQLAlchemyRecordStore":
        """优先使用实体所在的 session"""
        session = object_session(entity)
        if session is not None:
            return cls(session)
        return cls.from_model(type(entity))

    @property
    def session(self) -> Session:
        return self._session

    # ==================== 条件构建 ====================

    def _criteria(self, model: Type, conditions: Sequence[Condition]) -> list:
        criteria = []
        for cond in conditions:
            column = getattr(model, cond.field)
            if cond.value is None and cond.op in ("==", "!="):
                criteria.append(column.is_(None) if cond.op == "==" else column.is_not(None))
            elif cond.op == "==":
                criteria.append(column == cond.value)
            elif cond.op == "!=":
                criteria.append(column != cond.value)
            elif cond.op == "<":
                criteria.append(column < cond.value)
            elif cond.op == "<=":
                criteria.append(column <= cond.value)
            elif cond.op == ">":
                criteria.append(column > cond.value)
            else:
                criteria.append(column >= cond.value)
        return criteria

    def _exclusion(self, model: Type, exclude: Sequence[Any]):
        identities = [
            state.identity for state in (sa_inspect(obj) for obj in exclude)
            if state.identity is not None
        ]
        if not identities:
            return None
        pk_columns = sa_inspect(model).primary_key
        if len(pk_columns) == 1:
            return pk_columns[0].not_in([identity[0] for identity in identities])
        return tuple_(*pk_columns).not_in(identities)

    # ==================== RecordStore 实现 ====================

    def persist(self, entity: Any) -> None:
        self._session.add(entity)
        self._session.flush()

    def persist_all(self, entities: Iterable[Any]) -> None:
        self._session.add_all(list(entities))
        self._session.flush()

    def max_of(self, model, field, conditions=(), exclude=()) -> Optional[int]:
        stmt = select(func.max(getattr(model, field))).where(*self._criteria(model, conditions))
        exclusion = self._exclusion(model, exclude)
        if exclusion is not None:
            stmt = stmt.where(exclusion)
        with self._session.no_autoflush:
            return self._session.execute(stmt).scalar()

    def range_query(self, model, field, conditions=(), descending=False, limit=None) -> List[Any]:
        column = getattr(model, field)
        pk_columns = list(sa_inspect(model).primary_key)
        if descending:
            order_by = [column.desc()] + [pk.desc() for pk in pk_columns]
        else:
            order_by = [column.asc()] + [pk.asc() for pk in pk_columns]
        stmt = select(model).where(*self._criteria(model, conditions)).order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session.no_autoflush:
            return list(self._session.scalars(stmt).all())

    def bulk_increment(self, model, field, conditions=(), delta=1) -> int:
        column = getattr(model, field)
        stmt = (
            update(model)
            .where(*self._criteria(model, conditions))
            .values({column: column + delta})
        )
        with self._session.no_autoflush:
            result = self._session.execute(stmt)
        logger.debug(f"{model.__name__}.{field} 批量调整 {delta:+d}，影响 {result.rowcount} 行")
        return result.rowcount

    def transaction(self) -> ContextManager:
        return transaction_manager.transaction(session=self._session)


__all__ = [
    "Condition",
    "RecordStore",
    "SQLAlchemyRecordStore",
]
