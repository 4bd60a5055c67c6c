"""异常类测试

测试业务异常基类与排序异常
"""

from yseq.exceptions import (
    BusinessException,
    ErrorCode,
)
from yseq.orm.sequence import (
    SequenceError,
    ConfigurationKeyError,
    NotFoundError,
    InvalidPositionError,
    SequenceNotRegisteredError,
)


class TestBusinessException:
    """BusinessException 测试"""

    def test_defaults(self):
        """测试默认值"""
        exc = BusinessException("操作失败")

        assert exc.message == "操作失败"
        assert exc.code == ErrorCode.BUSINESS_ERROR
        assert exc.status_code == 400
        assert exc.details == []

    def test_to_dict(self):
        """测试转换为字典"""
        exc = BusinessException("失败", details=["a"], model="Banner")

        data = exc.to_dict()

        assert data["message"] == "失败"
        assert data["details"] == ["a"]
        assert data["extra"] == {"model": "Banner"}

    def test_error_code_is_str(self):
        """测试错误码可以直接作为字符串比较"""
        assert ErrorCode.SEQUENCE_INVALID_POSITION == "SEQUENCE_INVALID_POSITION"


class TestSequenceExceptions:
    """排序异常测试"""

    def test_hierarchy(self):
        """测试排序异常都是业务异常"""
        for exc in (
            ConfigurationKeyError("x"),
            NotFoundError("next"),
            InvalidPositionError(),
            SequenceNotRegisteredError(object),
        ):
            assert isinstance(exc, SequenceError)
            assert isinstance(exc, BusinessException)

    def test_configuration_key_error(self):
        """测试配置键错误"""
        exc = ConfigurationKeyError("grop", available=["group", "field_name"])

        assert exc.key == "grop"
        assert exc.available == ("group", "field_name")
        assert exc.extra["key"] == "grop"
        assert exc.details

    def test_not_found_error(self):
        """测试相邻记录不存在"""
        exc = NotFoundError("previous", sequence=1, model="Banner")

        assert exc.direction == "previous"
        assert exc.status_code == 404
        assert "Banner" in exc.message

    def test_invalid_position_error(self):
        """测试无效位置"""
        exc = InvalidPositionError("越界", position=9)

        assert exc.position == 9
        assert exc.extra["position"] == 9
        assert exc.code == ErrorCode.SEQUENCE_INVALID_POSITION

    def test_not_registered_error(self):
        """测试未注册模型"""
        class Foo:
            pass

        exc = SequenceNotRegisteredError(Foo())

        assert exc.extra["model"] == "Foo"
        assert exc.status_code == 500
