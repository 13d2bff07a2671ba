"""标签测试模型

测试共用的模型定义（全局只定义一次，避免重复映射同名表）：

- Tag / PostTag / Post: 默认配置（维护顺序与计数）
- ProductTag / Product: 与 Post 共享 Tag 的第二张关联表
- Label / note_label / Note: 关联表为 Table，不维护顺序与计数，分隔符为 ";"
"""

from sqlalchemy import Boolean, Column, Integer, String, Table, Text, UniqueConstraint, func, select
from sqlalchemy.orm import Mapped, mapped_column

from taggable.orm import Base, CoreModel
from taggable.tagging import AbstractTag, AbstractTagRelation, TagMixin, TaggableMixin


class Tag(TagMixin, CoreModel, AbstractTag):
    """标签模型"""
    __tablename__ = "test_tag"


class PostTag(CoreModel, AbstractTagRelation):
    """文章标签关联"""
    __tablename__ = "test_post_tag"


class ProductTag(CoreModel, AbstractTagRelation):
    """产品标签关联"""
    __tablename__ = "test_product_tag"


class Post(TaggableMixin, CoreModel):
    """文章模型"""
    __tablename__ = "test_post"
    __tag_model__ = Tag
    __tag_relation_model__ = PostTag

    title: Mapped[str] = mapped_column(String(200))
    published: Mapped[bool] = mapped_column(Boolean, default=True)


class Product(TaggableMixin, CoreModel):
    """产品模型 - 与文章共享标签"""
    __tablename__ = "test_product"
    __tag_model__ = Tag
    __tag_relation_model__ = ProductTag

    name: Mapped[str] = mapped_column(String(200))


class Label(TagMixin, CoreModel):
    """没有计数字段的标签模型"""
    __tablename__ = "test_label"

    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)


note_label = Table(
    "test_note_label",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", Integer, nullable=False),
    Column("tag_id", Integer, nullable=False),
    UniqueConstraint("owner_id", "tag_id", name="uq_test_note_label_owner_tag"),
)


class Note(TaggableMixin, CoreModel):
    """便签模型 - 关联表不维护顺序与计数"""
    __tablename__ = "test_note"
    __tag_model__ = Label
    __tag_relation_model__ = note_label
    __tagging_options__ = {"order_column": None, "count_attribute": None, "delimiter": ";"}

    body: Mapped[str] = mapped_column(Text, nullable=True)


# ==================== 辅助函数 ====================

def link_rows(session, owner_id):
    """读取文章的关联行：[(标签名, sort_order), ...]，按 sort_order 排序"""
    stmt = (
        select(Tag.name, PostTag.sort_order)
        .join_from(PostTag, Tag, PostTag.tag_id == Tag.id)
        .where(PostTag.owner_id == owner_id)
        .order_by(PostTag.sort_order)
    )
    return [tuple(row) for row in session.execute(stmt)]


def tag_counts(session):
    """读取所有标签的计数：{标签名: count}"""
    return {name: count for name, count in session.execute(select(Tag.name, Tag.count))}


def post_link_counts(session):
    """按关联行统计每个标签被文章引用的次数：{标签名: 行数}"""
    stmt = (
        select(Tag.name, func.count(PostTag.id))
        .join_from(Tag, PostTag, PostTag.tag_id == Tag.id, isouter=True)
        .group_by(Tag.name)
    )
    return {name: count for name, count in session.execute(stmt)}
