"""异常模块

使用示例:
    from yseq.exceptions import BusinessException, ErrorCode
"""

from .exceptions import (
    ErrorCode,
    ErrorCodeType,
    BusinessException,
)

__all__ = [
    "ErrorCode",
    "ErrorCodeType",
    "BusinessException",
]
