"""ID模型基类

提供自增整数主键。CoreModel 继承自 IdModel，一般情况下应直接使用 CoreModel。
"""

from __future__ import annotations

from sqlalchemy import Integer
from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from typing_extensions import dataclass_transform


# 声明基类
Base = declarative_base()


@dataclass_transform(kw_only_default=True, field_specifiers=(mapped_column,))
class IdModel(Base):
    """ID模型基类

    使用示例:
        class Post(IdModel):
            __tablename__ = "post"
            title = mapped_column(String(100))
    """
    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, comment="主键")
