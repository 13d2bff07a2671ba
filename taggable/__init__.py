"""taggable - SQLAlchemy 标签扩展

为 SQLAlchemy 模型提供多对多标签能力：标签文本解析、关联表同步（顺序与计数维护）、
标签查询、链接渲染、标签输入组件以及 FastAPI 自动补全接口。

使用示例:
    from taggable.orm import CoreModel, init_database
    from taggable.tagging import AbstractTag, AbstractTagRelation, TagMixin, TaggableMixin

    class Tag(TagMixin, CoreModel, AbstractTag):
        __tablename__ = "tag"

    class PostTag(CoreModel, AbstractTagRelation):
        __tablename__ = "post_tag"

    class Post(TaggableMixin, CoreModel):
        __tablename__ = "post"
        __tag_model__ = Tag
        __tag_relation_model__ = PostTag

    init_database("sqlite:///./app.db")

    post = Post()
    post.tag_text = "python, sqlalchemy"
    post.save(commit=True)
"""

from .version import __version__, __author__, __description__

from .exceptions import BusinessException, Err, ErrorCode, register_exception_handlers
from .config import AppSettings, TaggingSettings, load_yaml_config
from .log import get_logger, setup_root_logger
from .tagging import (
    ConfigurationError,
    TaggingConfig,
    TagSetReconciler,
    ReconcileResult,
    TagQuery,
    TagLifecycle,
    TaggableMixin,
    TagMixin,
    AbstractTag,
    AbstractTagRelation,
    TagText,
    TagEditor,
    TagEditorAsset,
    parse_tag_text,
)

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "BusinessException",
    "Err",
    "ErrorCode",
    "register_exception_handlers",
    "AppSettings",
    "TaggingSettings",
    "load_yaml_config",
    "get_logger",
    "setup_root_logger",
    "ConfigurationError",
    "TaggingConfig",
    "TagSetReconciler",
    "ReconcileResult",
    "TagQuery",
    "TagLifecycle",
    "TaggableMixin",
    "TagMixin",
    "AbstractTag",
    "AbstractTagRelation",
    "TagText",
    "TagEditor",
    "TagEditorAsset",
    "parse_tag_text",
]
