"""标签模块

为模型提供标签能力：

- TaggableMixin: 拥有者模型通过 tag_text 读写标签文本，保存时同步关联表
- TagMixin: 标签模型的链接渲染、使用次数、拥有者查询与删除清理
- TagSetReconciler / TagQuery / TagLifecycle: 不依赖 Mixin 的底层实现
- TagEditor: jQuery tagEditor 输入组件

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

    post.tag_text = "python, sqlalchemy"
    post.save(commit=True)
"""

from .exceptions import TaggingError, ConfigurationError
from .parser import DEFAULT_DELIMITER, parse_tag_text, canonical_tag_text
from .config import TaggingConfig, register_tagging_config, get_tagging_configs
from .tag_model import AbstractTag, AbstractTagRelation
from .reconciler import ReconcileResult, TagSetReconciler
from .query import TagQuery, escape_like
from .lifecycle import TagLifecycle, cleanup_tag_links
from .validators import TagText, validate_tag_text
from .rendering import TagLinkRenderer, tag_url, tag_link, tag_links, render_attributes
from .widget import TagEditor, TagEditorAsset
from .taggable_mixin import TaggableMixin
from .tag_mixin import TagMixin

__all__ = [
    # 异常
    "TaggingError",
    "ConfigurationError",
    # 解析
    "DEFAULT_DELIMITER",
    "parse_tag_text",
    "canonical_tag_text",
    # 配置
    "TaggingConfig",
    "register_tagging_config",
    "get_tagging_configs",
    # 模型
    "AbstractTag",
    "AbstractTagRelation",
    "TaggableMixin",
    "TagMixin",
    # 同步与查询
    "ReconcileResult",
    "TagSetReconciler",
    "TagQuery",
    "escape_like",
    "TagLifecycle",
    "cleanup_tag_links",
    # 验证
    "TagText",
    "validate_tag_text",
    # 渲染
    "TagLinkRenderer",
    "tag_url",
    "tag_link",
    "tag_links",
    "render_attributes",
    "TagEditor",
    "TagEditorAsset",
]
