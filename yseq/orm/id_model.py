"""ID模型基类

提供自增整数主键。排序操作的所有写入都以主键定位记录，
同序号时也以主键作为稳定的次级排序键。
"""

from __future__ import annotations

from sqlalchemy import Integer
from sqlalchemy.orm import declarative_base, Mapped, mapped_column


# 声明基类
Base = declarative_base()


class IdModel(Base):
    """ID模型基类

    使用示例:
        class Banner(IdModel):
            __tablename__ = "banner"
            title = mapped_column(String(50))
    """
    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, comment="主键")


__all__ = ["Base", "IdModel"]
