"""标签模型定义

提供标签系统的抽象模型定义。

使用示例:
    from taggable.orm import CoreModel
    from taggable.tagging import AbstractTag, AbstractTagRelation, TagMixin, TaggableMixin

    class Tag(TagMixin, CoreModel, AbstractTag):
        __tablename__ = "tag"

    class PostTag(CoreModel, AbstractTagRelation):
        __tablename__ = "post_tag"

    class Post(TaggableMixin, CoreModel):
        __tablename__ = "post"
        __tag_model__ = Tag
        __tag_relation_model__ = PostTag
"""

from typing import List

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, declared_attr


class AbstractTag:
    """标签抽象模型

    字段说明:
        - name: 标签名称（唯一，按原样比较）
        - count: 使用次数（冗余字段，等于引用该标签的关联行数）

    标签名唯一约束用于处理并发创建同名标签：插入冲突时回退为查询已有标签。
    使用次数降为 0 的标签不会被自动删除。
    """

    name: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
        index=True,
        comment="标签名称"
    )

    count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
        comment="使用次数"
    )

    # ==================== 类方法 ====================

    @classmethod
    def get_by_name(cls, name: str):
        """按名称获取标签，不存在返回 None"""
        return cls.query.filter_by(name=name).first()

    @classmethod
    def get_popular(cls, limit: int = 10) -> List["AbstractTag"]:
        """获取热门标签

        Args:
            limit: 返回数量

        Returns:
            按使用次数降序的标签列表
        """
        return cls.query.order_by(cls.count.desc(), cls.name.asc()).limit(limit).all()

    @classmethod
    def get_unused(cls) -> List["AbstractTag"]:
        """获取未被使用的标签（使用次数为 0）"""
        return cls.query.filter(cls.count == 0).order_by(cls.name.asc()).all()


class AbstractTagRelation:
    """标签关联抽象模型

    一行表示一个拥有者关联一个标签，同一拥有者的 sort_order 为 0..n-1 的连续整数。

    字段说明:
        - owner_id: 拥有者主键
        - tag_id: 标签主键
        - sort_order: 显示顺序
    """

    owner_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="拥有者ID"
    )

    tag_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="标签ID"
    )

    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="显示顺序"
    )

    @declared_attr.directive
    def __table_args__(cls):
        return (
            UniqueConstraint("owner_id", "tag_id", name=f"uq_{cls.__tablename__}_owner_tag"),
        )
