"""序号字段访问器

注册时按配置的字段名绑定一次，之后引擎只通过访问器读写序号和分组字段，
不再在每次调用时拼接属性名。
"""

from __future__ import annotations

from operator import attrgetter
from typing import Any, Dict, Optional, Tuple, Type

from .exceptions import ConfigurationKeyError


class SequenceAttributeAccessor:
    """序号字段访问器

    使用示例:
        accessor = SequenceAttributeAccessor(MenuItem, "seq", ("menu_id",))
        accessor.get(item)              # 3
        accessor.set(item, 4)
        accessor.group_values(item)     # {"menu_id": 1}
        accessor.is_assigned(item)      # True
    """

    def __init__(self, model: Type, field_name: str, group_fields: Tuple[str, ...] = ()):
        self.model = model
        self.field_name = field_name
        self.group_fields = tuple(group_fields)
        self._getter = attrgetter(field_name)
        self._group_getters = tuple((name, attrgetter(name)) for name in self.group_fields)
        self._validated = False

    # ==================== 列定义 ====================

    def validate(self) -> None:
        """检查模型上确实定义了序号字段和分组字段

        模型类创建时映射尚未完成，所以推迟到第一次使用时检查。
        """
        if self._validated:
            return
        for name in (self.field_name,) + self.group_fields:
            if not hasattr(self.model, name):
                raise ConfigurationKeyError(
                    name,
                    message=f"模型 {self.model.__name__} 上不存在字段 '{name}'",
                )
        self._validated = True

    @property
    def column(self):
        """序号列（InstrumentedAttribute）"""
        self.validate()
        return getattr(self.model, self.field_name)

    def group_column(self, name: str):
        """分组列"""
        self.validate()
        if name not in self.group_fields:
            raise ConfigurationKeyError(name, available=self.group_fields,
                                        message=f"'{name}' 不是 {self.model.__name__} 的分组字段")
        return getattr(self.model, name)

    # ==================== 读写 ====================

    def get(self, entity: Any) -> Optional[int]:
        return self._getter(entity)

    def set(self, entity: Any, value: int) -> None:
        setattr(entity, self.field_name, value)

    def is_assigned(self, entity: Any) -> bool:
        """0 与 None 都表示尚未分配（存储的序号从 1 开始）"""
        return is_assigned_value(self._getter(entity))

    def group_values(self, entity: Any) -> Dict[str, Any]:
        return {name: getter(entity) for name, getter in self._group_getters}

    def __repr__(self) -> str:
        return (
            f"SequenceAttributeAccessor(model={self.model.__name__}, "
            f"field_name={self.field_name!r}, group_fields={self.group_fields!r})"
        )


def is_assigned_value(value: Optional[int]) -> bool:
    return value is not None and value != 0


__all__ = ["SequenceAttributeAccessor", "is_assigned_value"]
