"""日志模块

使用示例:
    from yseq.log import setup_logger, get_logger

    setup_logger("yseq", level="DEBUG", log_file="logs/sequence.log")
    logger = get_logger()
"""

from .logger import (
    setup_logger,
    setup_root_logger,
    create_formatter,
    MicrosecondFormatter,
    DEFAULT_LOG_FORMAT,
    sequence_logger,
    transaction_logger,
    logger,
    get_logger,
)

__all__ = [
    "setup_logger",
    "setup_root_logger",
    "create_formatter",
    "MicrosecondFormatter",
    "DEFAULT_LOG_FORMAT",
    "sequence_logger",
    "transaction_logger",
    "logger",
    "get_logger",
]
