"""
ORM基础模型

提供常用的CRUD操作，排序相关模型都继承自这里
"""

from __future__ import annotations

from sqlalchemy import func, DateTime
from sqlalchemy.orm import Mapped, mapped_column, declared_attr, Session, Query
from datetime import datetime
from typing import ClassVar, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from typing_extensions import Self

from yseq.log import get_logger

from .id_model import IdModel, Base
from .utils import to_snake_case


logger = get_logger("yseq.orm.transaction")


class CoreModel(IdModel):
    """ORM基础模型类

    继承自 IdModel，提供功能：
    - 自动表名生成（驼峰转下划线）
    - 创建/更新时间戳
    - 常用CRUD操作方法
    - 事务上下文中的提交抑制

    使用示例:
        from yseq.orm import BaseModel, init_database

        init_database("sqlite:///./test.db")

        class Banner(BaseModel):
            title: Mapped[str] = mapped_column(String(100))

        banner = Banner(title="首页").save(commit=True)
    """
    __abstract__ = True

    # 注意：query 属性在 init_database 后通过 scoped_session.query_property() 设置
    if TYPE_CHECKING:
        query: ClassVar[Query[Self]]

    @declared_attr.directive
    def __tablename__(cls) -> str:
        """驼峰命名转下划线"""
        name = cls.__name__
        if '_' in name:
            raise ValueError(f'{name}字符中包含下划线，无法转换')
        return to_snake_case(name)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        comment="创建时间"
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
        onupdate=func.now(),
        comment="更新时间"
    )

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.id}>"

    @property
    def session(self) -> Session:
        """获取当前session

        优先从 query 属性获取 session，如果不可用则从全局 scoped_session 获取
        """
        query = getattr(self.__class__, "query", None)
        if query is not None:
            return query.session
        from .db_session import db_manager
        return db_manager.get_session()

    # ==================== CRUD 操作方法 ====================

    def save(self, commit: bool = False) -> Self:
        """保存对象（自动判断新增或更新）

        Args:
            commit: 是否立即提交，默认False
                   - 无事务时：执行 session.commit()
                   - 有事务时：commit 被抑制，但会自动 flush 以获取自动生成字段
        """
        self.session.add(self)
        self.__is_commit(commit)
        return self

    def delete(self, commit: bool = False):
        """删除对象

        启用排序钩子时，flush 阶段会自动压缩同分区后续记录的序号。
        """
        self.session.delete(self)
        self.__is_commit(commit)

    @classmethod
    def add_all(cls, objects: List[CoreModel], commit: bool = False) -> List[CoreModel]:
        """批量添加对象到session"""
        session = cls.query.session
        session.add_all(objects)
        if commit:
            if _should_suppress_commit():
                session.flush()
            else:
                session.commit()
        return objects

    @classmethod
    def get(cls, id: int):
        """根据ID获取对象，不存在返回None"""
        return cls.query.filter_by(id=id).one_or_none()

    @classmethod
    def get_all(cls):
        """获取所有记录"""
        return cls.query.all()

    def __is_commit(self, commit=False):
        """根据参数决定是否提交

        当在事务上下文中且启用了提交抑制时，commit=True 会被忽略，
        但会自动执行 flush 以获取自动生成的字段（id, created_at 等）。
        """
        if commit:
            if _should_suppress_commit():
                self.session.flush()
                return
            self.session.commit()


def _should_suppress_commit() -> bool:
    """当前事务上下文是否抑制 commit=True"""
    from .transaction import get_current_transaction
    tx = get_current_transaction()
    if tx is not None and tx.should_suppress_commit():
        logger.debug("commit=True 被事务上下文抑制")
        return True
    return False


class BaseModel(CoreModel):
    """业务模型基类

    使用示例:
        class MenuItem(BaseModel, SequenceFieldMixin, SequenceMixin):
            __sequence__ = {"group": "menu_id"}
            menu_id: Mapped[int] = mapped_column(Integer)
    """
    __abstract__ = True


__all__ = ["Base", "CoreModel", "BaseModel"]
