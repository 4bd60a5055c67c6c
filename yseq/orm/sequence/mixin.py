"""排序 Mixin

把排序引擎的操作挂到模型上，并在类定义时自动注册。

使用示例:
    from yseq.orm import BaseModel
    from yseq.orm.sequence import SequenceFieldMixin, SequenceMixin

    # 全表一个分区
    class Banner(BaseModel, SequenceFieldMixin, SequenceMixin):
        __tablename__ = "banner"
        title: Mapped[str] = mapped_column(String(100))

    # 同一菜单、同一父节点内排序，位置从 1 开始
    class MenuItem(BaseModel, SequenceFieldMixin, SequenceMixin):
        __tablename__ = "menu_item"
        __sequence__ = {"group": ["menu_id", "parent_id"], "order_from_1": True}

        menu_id: Mapped[int] = mapped_column(Integer)
        parent_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    item = MenuItem.get(1)
    item.move_up()
    item.move_to(1)
    MenuItem.sequenced(menu_id=1, parent_id=None)
"""

from typing import Any, ClassVar, List, Optional, Sequence

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from .engine import SequenceEngine, sequence_engine
from .registry import sequence_registry


class SequenceFieldMixin:
    """标准的序号字段

    字段说明:
        - seq: 排序序号，0 表示尚未分配，分配后在分区内从 1 开始连续
    """

    seq: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        index=True,
        comment="排序序号"
    )


class SequenceMixin:
    """排序操作 Mixin

    可配置属性:
        - __sequence__: 排序选项字典，支持 group / field_name / exceptions / order_from_1
          （也接受 fieldName / orderFrom1 写法），未声明的项使用全局默认值
        - __sequence_engine__: 使用的引擎，默认全局 sequence_engine

    抽象类（__abstract__ = True）不注册；未声明 __sequence__ 的子类沿用父类的配置。
    """

    __sequence__: ClassVar[Optional[dict]] = None
    __sequence_engine__: ClassVar[SequenceEngine] = sequence_engine

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.__dict__.get("__abstract__", False):
            return
        if not any("__tablename__" in klass.__dict__ or "__table__" in klass.__dict__
                   for klass in cls.__mro__):
            return
        own_options = cls.__dict__.get("__sequence__")
        if own_options is None and sequence_registry.is_registered(cls):
            return
        sequence_registry.register(cls, own_options or {})

    # ==================== 分配 ====================

    def assign_sequence(self):
        """追加到分区末尾（已分配时不变）"""
        return self.__sequence_engine__.assign_sequence(self)

    @property
    def sequence_position(self) -> Optional[int]:
        """对外位置，未分配时为 None"""
        return self.__sequence_engine__.position(self)

    # ==================== 相邻记录 ====================

    def get_previous(self):
        return self.__sequence_engine__.get_previous(self)

    def get_next(self):
        return self.__sequence_engine__.get_next(self)

    # ==================== 移动 ====================

    def move_up(self):
        """上移一位"""
        return self.__sequence_engine__.move_up(self)

    def move_down(self):
        """下移一位"""
        return self.__sequence_engine__.move_down(self)

    def move_to(self, position: int):
        """移动到指定位置"""
        return self.__sequence_engine__.move_to(self, position)

    def move_to_top(self):
        return self.__sequence_engine__.move_to_top(self)

    def move_to_bottom(self):
        return self.__sequence_engine__.move_to_bottom(self)

    # ==================== 分区级操作 ====================

    @classmethod
    def sequenced(cls, **group_values: Any) -> List[Any]:
        """按序号升序返回分区内的记录"""
        return cls.__sequence_engine__.sequenced(cls, **group_values)

    @classmethod
    def normalize_sequence(cls, **group_values: Any) -> int:
        """重排分区序号为 1..n"""
        return cls.__sequence_engine__.normalize(cls, **group_values)

    @classmethod
    def reorder_sequence(cls, ids: Sequence[Any], **group_values: Any) -> int:
        """按主键顺序重排分区（前端拖拽后整体提交）

        使用示例:
            Banner.reorder_sequence([3, 1, 2])
        """
        return cls.__sequence_engine__.reorder(cls, ids, **group_values)


__all__ = [
    "SequenceFieldMixin",
    "SequenceMixin",
]
