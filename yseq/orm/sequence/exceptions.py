"""排序异常

所有异常都继承自 BusinessException，可以直接交给上层的统一异常处理。
"""

from typing import Any, Iterable, List, Optional

from fastapi import status

from yseq.exceptions import BusinessException, ErrorCode, ErrorCodeType


class SequenceError(BusinessException):
    """排序错误基类"""

    def __init__(
        self,
        message: str = "排序操作失败",
        code: ErrorCodeType = ErrorCode.OPERATION_FAILED,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(message=message, code=code, status_code=status_code, details=details, **extra)


class ConfigurationKeyError(SequenceError):
    """访问了合并后配置中不存在的键

    属于调用方的配置错误，不做任何恢复。
    """

    def __init__(self, key: str, available: Iterable[str] = (), message: str = None):
        self.key = key
        self.available = tuple(available)
        super().__init__(
            message=message or f"排序配置中不存在键 '{key}'",
            code=ErrorCode.SEQUENCE_CONFIG_KEY_ERROR,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=[f"可用的键: {', '.join(self.available)}"] if self.available else None,
            key=key,
        )


class NotFoundError(SequenceError):
    """上移/下移时不存在相邻记录（仅 exceptions=True 时抛出）"""

    def __init__(self, direction: str, sequence: Optional[int] = None, model: str = None):
        self.direction = direction
        self.sequence = sequence
        label = "上一条" if direction == "previous" else "下一条"
        super().__init__(
            message=f"{model or '记录'} 不存在{label}记录，无法移动",
            code=ErrorCode.SEQUENCE_NEIGHBOR_NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
            direction=direction,
            sequence=sequence,
        )


class InvalidPositionError(SequenceError):
    """目标位置无效（越界，或记录尚未分配序号）"""

    def __init__(self, message: str = "目标位置无效", position: Any = None, **extra: Any):
        self.position = position
        super().__init__(
            message=message,
            code=ErrorCode.SEQUENCE_INVALID_POSITION,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            position=position,
            **extra
        )


class SequenceNotRegisteredError(SequenceError):
    """模型没有注册排序配置"""

    def __init__(self, model: Any):
        name = getattr(model, "__name__", type(model).__name__)
        super().__init__(
            message=f"模型 {name} 未注册排序配置，请使用 register_sequence() 或 SequenceMixin",
            code=ErrorCode.SEQUENCE_NOT_REGISTERED,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            model=name,
        )


__all__ = [
    "SequenceError",
    "ConfigurationKeyError",
    "NotFoundError",
    "InvalidPositionError",
    "SequenceNotRegisteredError",
]
