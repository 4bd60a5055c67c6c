"""业务异常类定义

定义排序库使用的业务异常类体系。
"""

import copy
from typing import Optional, List, Any, Dict, Union
from fastapi import status
from enum import Enum


class ErrorCode(str, Enum):
    """错误代码枚举

    继承自 str，可以直接作为字符串使用。

    使用示例:
        from yseq.exceptions import ErrorCode

        if exc.code == ErrorCode.SEQUENCE_NEIGHBOR_NOT_FOUND:
            ...
    """

    # ==================== 通用错误 ====================
    BUSINESS_ERROR = "BUSINESS_ERROR"
    OPERATION_FAILED = "OPERATION_FAILED"

    # ==================== 排序相关 ====================
    SEQUENCE_CONFIG_KEY_ERROR = "SEQUENCE_CONFIG_KEY_ERROR"
    SEQUENCE_NEIGHBOR_NOT_FOUND = "SEQUENCE_NEIGHBOR_NOT_FOUND"
    SEQUENCE_INVALID_POSITION = "SEQUENCE_INVALID_POSITION"
    SEQUENCE_NOT_REGISTERED = "SEQUENCE_NOT_REGISTERED"


# 类型别名，支持枚举和字符串
ErrorCodeType = Union[str, ErrorCode]


class BusinessException(Exception):
    """业务异常基类

    属性:
        message: 错误消息（面向用户）
        code: 错误代码（用于程序判断，支持 ErrorCode 枚举或字符串）
        status_code: HTTP 状态码
        details: 详细错误信息列表
        extra: 额外的上下文信息

    使用示例:
        raise BusinessException("操作失败", code=ErrorCode.OPERATION_FAILED)

        raise BusinessException(
            message="排序失败",
            code=ErrorCode.OPERATION_FAILED,
            extra={"model": "Banner", "id": 3}
        )
    """

    def __init__(
        self,
        message: str,
        code: ErrorCodeType = ErrorCode.BUSINESS_ERROR,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or []
        self.extra = extra
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": copy.deepcopy(self.details),
            "extra": copy.deepcopy(self.extra)
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"status_code={self.status_code})"
        )


__all__ = [
    "ErrorCode",
    "ErrorCodeType",
    "BusinessException",
]
