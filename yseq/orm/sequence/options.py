"""排序配置解析

模型声明的选项覆盖全局默认值，合并结果在注册时固定下来。
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from .exceptions import ConfigurationKeyError


# 默认值，与 SequenceSettings 保持一致
DEFAULT_OPTIONS: Dict[str, Any] = {
    "group": "",
    "field_name": "seq",
    "exceptions": False,
    "order_from_1": False,
}

# 驼峰写法的别名
OPTION_ALIASES: Dict[str, str] = {
    "fieldName": "field_name",
    "orderFrom1": "order_from_1",
}


def normalize_option_key(key: str) -> str:
    """把别名统一成下划线写法"""
    return OPTION_ALIASES.get(key, key)


def normalize_group(value: Any) -> Tuple[str, ...]:
    """把 group 选项统一成字段名元组

    - None / "" / [] → ()
    - "category_id" → ("category_id",)
    - "menu_id, parent_id" → ("menu_id", "parent_id")
    - ["menu_id", "parent_id"] → ("menu_id", "parent_id")
    """
    if not value:
        return ()
    if isinstance(value, str):
        names = value.split(",")
    else:
        names = list(value)
    return tuple(str(name).strip() for name in names if str(name).strip())


class SequenceConfig:
    """合并后的排序配置（只读）

    使用示例:
        config = SequenceConfig.resolve({"group": "menu_id", "orderFrom1": True})
        config.get("field_name")   # "seq"
        config.get("orderFrom1")   # True
        config.get("unknown")      # ConfigurationKeyError
    """

    __slots__ = ("_options",)

    def __init__(self, options: Mapping[str, Any]):
        merged = {normalize_option_key(k): v for k, v in options.items()}
        merged["group"] = normalize_group(merged.get("group"))
        object.__setattr__(self, "_options", merged)

    @classmethod
    def resolve(
        cls,
        overrides: Optional[Mapping[str, Any]] = None,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> "SequenceConfig":
        """合并默认值与模型覆盖项

        Raises:
            ConfigurationKeyError: 覆盖项中包含未知的键
        """
        base = {normalize_option_key(k): v for k, v in (defaults or DEFAULT_OPTIONS).items()}
        merged = dict(base)
        for key, value in (overrides or {}).items():
            name = normalize_option_key(key)
            if name not in base:
                raise ConfigurationKeyError(key, available=base.keys())
            merged[name] = value
        return cls(merged)

    # ==================== 访问 ====================

    def get(self, key: str) -> Any:
        """按键取值，键不存在时抛出 ConfigurationKeyError"""
        name = normalize_option_key(key)
        try:
            return self._options[name]
        except KeyError:
            raise ConfigurationKeyError(key, available=self._options.keys()) from None

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_option_key(key) in self._options

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __setattr__(self, name, value):
        raise AttributeError("SequenceConfig 是只读的")

    @property
    def group(self) -> Tuple[str, ...]:
        return self._options["group"]

    @property
    def field_name(self) -> str:
        return self._options["field_name"]

    @property
    def exceptions(self) -> bool:
        return bool(self._options["exceptions"])

    @property
    def order_from_1(self) -> bool:
        return bool(self._options["order_from_1"])

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._options)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SequenceConfig):
            return NotImplemented
        return self._options == other._options

    def __hash__(self):
        return hash(tuple(sorted((k, repr(v)) for k, v in self._options.items())))

    def __repr__(self) -> str:
        return f"SequenceConfig({self._options!r})"


__all__ = [
    "DEFAULT_OPTIONS",
    "OPTION_ALIASES",
    "normalize_option_key",
    "normalize_group",
    "SequenceConfig",
]
