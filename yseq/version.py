"""版本信息"""

__version__ = "0.1.0"
__author__ = "yseq"
__description__ = "分组内稠密序号维护（SQLAlchemy）"
