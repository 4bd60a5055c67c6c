"""排序配置与注册测试

测试：
1. 默认值与模型覆盖项的合并
2. 未知配置键抛出 ConfigurationKeyError
3. 注册表查找
4. 字段访问器
"""

import pytest
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from yseq.config import SequenceSettings
from yseq.exceptions import ErrorCode
from yseq.orm import BaseModel, SequenceFieldMixin, SequenceMixin
from yseq.orm.sequence import (
    DEFAULT_OPTIONS,
    SequenceConfig,
    SequenceRegistry,
    SequenceAttributeAccessor,
    ConfigurationKeyError,
    SequenceNotRegisteredError,
    normalize_group,
    sequence,
    sequence_registry,
    is_assigned_value,
)


class Row:
    """普通对象"""
    seq = 0
    group_id = None
    title = ""


class CfgAbstractBase(BaseModel, SequenceFieldMixin, SequenceMixin):
    """抽象基类不注册"""
    __abstract__ = True


class CfgArticle(CfgAbstractBase):
    """继承抽象基类的模型"""
    __tablename__ = "test_cfg_article"
    __table_args__ = {'extend_existing': True}
    __sequence__ = {"group": "column_id", "exceptions": True}

    column_id: Mapped[int] = mapped_column(Integer)
    title: Mapped[str] = mapped_column(String(100))


# ==================== 配置合并 ====================

class TestSequenceConfig:
    """SequenceConfig 测试"""

    def test_defaults(self):
        """测试默认值"""
        config = SequenceConfig.resolve()

        assert config.group == ()
        assert config.field_name == "seq"
        assert config.exceptions is False
        assert config.order_from_1 is False

    def test_overrides(self):
        """测试覆盖默认值"""
        config = SequenceConfig.resolve({"group": "menu_id, parent_id", "exceptions": True})

        assert config.group == ("menu_id", "parent_id")
        assert config.exceptions is True
        assert config.field_name == "seq"

    def test_camel_case_keys(self):
        """测试驼峰写法的键"""
        config = SequenceConfig.resolve({"fieldName": "rank", "orderFrom1": True})

        assert config.field_name == "rank"
        assert config.get("orderFrom1") is True
        assert config["order_from_1"] is True
        assert "fieldName" in config

    def test_unknown_override_key(self):
        """测试未知的覆盖键"""
        with pytest.raises(ConfigurationKeyError) as exc_info:
            SequenceConfig.resolve({"grop": "menu_id"})

        assert exc_info.value.key == "grop"
        assert "group" in exc_info.value.available
        assert exc_info.value.code == ErrorCode.SEQUENCE_CONFIG_KEY_ERROR
        assert exc_info.value.status_code == 500

    def test_unknown_lookup_key(self):
        """测试读取不存在的键"""
        config = SequenceConfig.resolve()

        with pytest.raises(ConfigurationKeyError):
            config.get("missing")
        with pytest.raises(ConfigurationKeyError):
            config["missing"]

    def test_read_only(self):
        """测试配置只读"""
        config = SequenceConfig.resolve()

        with pytest.raises(AttributeError):
            config.field_name = "other"

    def test_equality(self):
        """测试相等比较"""
        assert SequenceConfig.resolve({"group": ["a"]}) == SequenceConfig.resolve({"group": "a"})
        assert SequenceConfig.resolve({"group": "a"}) != SequenceConfig.resolve({"group": "b"})

    def test_normalize_group(self):
        """测试分组字段规范化"""
        assert normalize_group(None) == ()
        assert normalize_group("") == ()
        assert normalize_group([]) == ()
        assert normalize_group("a") == ("a",)
        assert normalize_group(" a , b ") == ("a", "b")
        assert normalize_group(("a", "b")) == ("a", "b")


# ==================== 注册表 ====================

class TestSequenceRegistry:
    """SequenceRegistry 测试"""

    def test_register_and_lookup(self):
        """测试注册与查找"""
        registry = SequenceRegistry()
        binding = registry.register(Row, group="group_id")

        assert registry.lookup(Row()) is binding
        assert Row in registry
        assert len(registry) == 1
        assert binding.config.group == ("group_id",)

    def test_register_unknown_key(self):
        """测试注册时使用未知的键"""
        registry = SequenceRegistry()

        with pytest.raises(ConfigurationKeyError):
            registry.register(Row, sort_by="title")

        assert not registry.is_registered(Row)

    def test_lookup_unregistered(self):
        """测试查找未注册的模型"""
        registry = SequenceRegistry()

        with pytest.raises(SequenceNotRegisteredError):
            registry.lookup(Row)

    def test_options_dict_and_overrides(self):
        """测试选项字典与关键字覆盖"""
        registry = SequenceRegistry()
        binding = registry.register(Row, {"group": "group_id"}, exceptions=True)

        assert binding.config.group == ("group_id",)
        assert binding.config.exceptions is True

    def test_configure_defaults_from_settings(self):
        """测试从 SequenceSettings 设置默认值"""
        registry = SequenceRegistry()
        registry.configure_defaults(SequenceSettings(order_from_1=True), exceptions=True)

        binding = registry.register(Row)

        assert binding.config.order_from_1 is True
        assert binding.config.exceptions is True
        assert registry.defaults["field_name"] == "seq"

    def test_configure_defaults_unknown_key(self):
        """测试设置默认值时使用未知的键"""
        registry = SequenceRegistry()

        with pytest.raises(ConfigurationKeyError):
            registry.configure_defaults(unknown=True)

    def test_clear_restores_defaults(self):
        """测试清空注册表"""
        registry = SequenceRegistry()
        registry.configure_defaults(exceptions=True)
        registry.register(Row)

        registry.clear()

        assert len(registry) == 0
        assert registry.defaults == DEFAULT_OPTIONS

    def test_decorator(self):
        """测试类装饰器注册"""
        @sequence(group="group_id", orderFrom1=True)
        class Decorated(Row):
            pass

        try:
            binding = sequence_registry.lookup(Decorated)
            assert binding.model is Decorated
            assert binding.config.order_from_1 is True
        finally:
            sequence_registry.unregister(Decorated)


# ==================== Mixin 自动注册 ====================

class TestMixinRegistration:
    """SequenceMixin 自动注册测试"""

    def test_abstract_base_not_registered(self):
        """测试抽象基类不注册"""
        assert sequence_registry.find(CfgAbstractBase) is None

    def test_model_registered_with_own_options(self):
        """测试模型使用自身声明的选项注册"""
        binding = sequence_registry.lookup(CfgArticle)

        assert binding.model is CfgArticle
        assert binding.config.group == ("column_id",)
        assert binding.config.exceptions is True


# ==================== 访问器 ====================

class TestAttributeAccessor:
    """SequenceAttributeAccessor 测试"""

    def test_get_and_set(self):
        """测试读写序号"""
        accessor = SequenceAttributeAccessor(Row, "seq", ("group_id",))
        row = Row()
        row.group_id = 3

        accessor.set(row, 4)

        assert accessor.get(row) == 4
        assert accessor.is_assigned(row)
        assert accessor.group_values(row) == {"group_id": 3}

    def test_missing_field(self):
        """测试模型上不存在配置的字段"""
        accessor = SequenceAttributeAccessor(Row, "rank")

        with pytest.raises(ConfigurationKeyError) as exc_info:
            accessor.validate()

        assert exc_info.value.key == "rank"

    def test_group_column(self):
        """测试读取分组列"""
        accessor = SequenceAttributeAccessor(Row, "seq", ("group_id",))

        assert accessor.group_column("group_id") is None
        with pytest.raises(ConfigurationKeyError):
            accessor.group_column("title")

    def test_unassigned_sentinel(self):
        """测试 0 与 None 都表示未分配"""
        assert is_assigned_value(None) is False
        assert is_assigned_value(0) is False
        assert is_assigned_value(1) is True
