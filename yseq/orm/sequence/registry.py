"""排序模型注册表

每个需要维护序号的模型在启动时显式注册一次，注册时固定配置与访问器。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Type, Union

from yseq.log import get_logger

from .accessor import SequenceAttributeAccessor
from .exceptions import SequenceNotRegisteredError
from .options import SequenceConfig, DEFAULT_OPTIONS

logger = get_logger("yseq.orm.sequence")


@dataclass(frozen=True)
class SequenceBinding:
    """已注册模型的配置与访问器"""
    model: Type
    config: SequenceConfig
    accessor: SequenceAttributeAccessor


class SequenceRegistry:
    """排序模型注册表

    使用示例:
        registry = SequenceRegistry()
        registry.register(MenuItem, group=["menu_id", "parent_id"])
        binding = registry.lookup(item)
        binding.config.field_name   # "seq"
    """

    def __init__(self, defaults: Optional[Mapping[str, Any]] = None):
        self._bindings: Dict[Type, SequenceBinding] = {}
        self._defaults: Dict[str, Any] = dict(defaults or DEFAULT_OPTIONS)

    # ==================== 默认值 ====================

    @property
    def defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    def configure_defaults(self, settings: Any = None, **options: Any) -> None:
        """设置全局默认值，只影响之后的注册

        Args:
            settings: SequenceSettings 实例（可选）
            **options: 单独覆盖的选项
        """
        defaults = dict(DEFAULT_OPTIONS)
        if settings is not None:
            defaults.update(settings.as_options())
        # 校验键名，拒绝未知选项
        defaults = SequenceConfig.resolve(options, defaults=defaults).as_dict()
        self._defaults = defaults
        logger.debug(f"排序默认配置已更新: {defaults}")

    # ==================== 注册 ====================

    def register(
        self,
        model: Type,
        options: Optional[Mapping[str, Any]] = None,
        **overrides: Any
    ) -> SequenceBinding:
        """注册模型

        Args:
            model: 模型类
            options: 选项字典（如模型的 __sequence__）
            **overrides: 额外的覆盖项

        Raises:
            ConfigurationKeyError: 选项中包含未知的键
        """
        merged = dict(options or {})
        merged.update(overrides)
        config = SequenceConfig.resolve(merged, defaults=self._defaults)
        accessor = SequenceAttributeAccessor(model, config.field_name, config.group)
        binding = SequenceBinding(model=model, config=config, accessor=accessor)
        self._bindings[model] = binding
        logger.debug(f"注册排序模型 {model.__name__}: {config!r}")
        return binding

    def unregister(self, model: Type) -> None:
        self._bindings.pop(model, None)

    def clear(self) -> None:
        self._bindings.clear()
        self._defaults = dict(DEFAULT_OPTIONS)

    # ==================== 查找 ====================

    def find(self, model_or_entity: Union[Type, Any]) -> Optional[SequenceBinding]:
        """查找模型绑定，沿 MRO 向上查找（多态子类使用父类的配置）"""
        model = model_or_entity if isinstance(model_or_entity, type) else type(model_or_entity)
        for klass in model.__mro__:
            binding = self._bindings.get(klass)
            if binding is not None:
                return binding
        return None

    def lookup(self, model_or_entity: Union[Type, Any]) -> SequenceBinding:
        """查找模型绑定，未注册时抛出 SequenceNotRegisteredError"""
        binding = self.find(model_or_entity)
        if binding is None:
            raise SequenceNotRegisteredError(model_or_entity)
        return binding

    def is_registered(self, model_or_entity: Union[Type, Any]) -> bool:
        return self.find(model_or_entity) is not None

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, model: Type) -> bool:
        return self.is_registered(model)


# 全局注册表
sequence_registry = SequenceRegistry()


def register_sequence(model: Type, **options: Any) -> SequenceBinding:
    """在全局注册表中注册模型

    使用示例:
        register_sequence(Product, group="category_id", exceptions=True)
    """
    return sequence_registry.register(model, **options)


def sequence(**options: Any):
    """类装饰器形式的注册

    使用示例:
        @sequence(group="category_id")
        class Product(BaseModel, SequenceFieldMixin):
            category_id: Mapped[int] = mapped_column(Integer)
    """
    def decorator(model: Type) -> Type:
        sequence_registry.register(model, **options)
        return model
    return decorator


def configure_sequence_defaults(settings: Any = None, **options: Any) -> None:
    """设置全局默认值（只影响之后注册的模型）

    使用示例:
        settings = load_yaml_config("config/settings.yaml")
        configure_sequence_defaults(settings.sequence)
    """
    sequence_registry.configure_defaults(settings, **options)


__all__ = [
    "SequenceBinding",
    "SequenceRegistry",
    "sequence_registry",
    "register_sequence",
    "sequence",
    "configure_sequence_defaults",
]
