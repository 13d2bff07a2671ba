"""标签管理 Mixin

为拥有者模型提供标签能力：通过 tag_text 读写分隔符形式的标签文本，
保存时自动同步关联表，删除时自动清理关联。

使用示例:
    from taggable.orm import CoreModel
    from taggable.tagging import TaggableMixin, TagMixin, AbstractTag, AbstractTagRelation

    class Tag(TagMixin, CoreModel, AbstractTag):
        __tablename__ = "tag"

    class PostTag(CoreModel, AbstractTagRelation):
        __tablename__ = "post_tag"

    # TaggableMixin 必须放在 CoreModel 之前，save()/delete() 才会经过它
    class Post(TaggableMixin, CoreModel):
        __tablename__ = "post"
        __tag_model__ = Tag
        __tag_relation_model__ = PostTag

        title = mapped_column(String(200))

    post = Post(title="Python 教程")
    post.tag_text = "python, tutorial"
    post.save(commit=True)

    post.get_tags()        # ["python", "tutorial"]
    post.has_tag("python") # True
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import event, select
from sqlalchemy import inspect as sa_inspect

from .config import TaggingConfig, register_tagging_config
from .exceptions import ConfigurationError
from .lifecycle import TagLifecycle
from .parser import parse_tag_text
from .query import ExtraFilter, TagQuery
from .reconciler import ReconcileResult
from .rendering import TagLinkRenderer, tag_links
from .validators import validate_tag_text


class TaggableMixin:
    """标签管理 Mixin

    配置属性:
        __tag_model__: 标签模型类（必须）
        __tag_relation_model__: 标签关联模型类或 Table（必须）
        __tagging_options__: 其余 TaggingConfig 选项，如
            {"order_column": None, "count_attribute": None, "delimiter": ";"}

    标签在 save() 时才写入：tag_text 赋值只记录待同步的文本。
    """

    # ==================== 配置 ====================

    __tag_model__: Any = None
    __tag_relation_model__: Any = None
    __tagging_options__: Dict[str, Any] = {}

    # ==================== 内部方法 ====================

    @classmethod
    def get_tagging_config(cls) -> TaggingConfig:
        """获取（并在首次调用时构建）该模型的标签配置

        Raises:
            ConfigurationError: 未设置或设置了无效的标签模型/关联模型
        """
        config = cls.__dict__.get("_tagging_config")
        if config is not None:
            return config

        if getattr(cls, "__tag_model__", None) is None:
            raise ConfigurationError(f"{cls.__name__} 必须设置 __tag_model__ 属性")
        if getattr(cls, "__tag_relation_model__", None) is None:
            raise ConfigurationError(f"{cls.__name__} 必须设置 __tag_relation_model__ 属性")

        options = dict(getattr(cls, "__tagging_options__", None) or {})
        config = TaggingConfig(
            tag_model=cls.__tag_model__,
            junction=cls.__tag_relation_model__,
            owner_model=cls,
            **options,
        )
        cls._tagging_config = config
        register_tagging_config(config)
        return config

    @classmethod
    def _tag_query(cls) -> TagQuery:
        return TagQuery(cls.get_tagging_config())

    @classmethod
    def _tag_lifecycle(cls) -> TagLifecycle:
        return TagLifecycle(cls.get_tagging_config())

    def _tag_owner_key(self) -> Any:
        """拥有者主键，未写入数据库时为 None"""
        identity = sa_inspect(self).identity
        return identity[0] if identity else None

    def _tag_session(self):
        state = sa_inspect(self)
        if state.session is not None:
            return state.session
        return self.get_tagging_config().get_session()

    # ==================== 标签文本 ====================

    @property
    def tag_text(self) -> str:
        """标签文本

        有待同步的文本时返回待同步文本，否则返回已保存的标签名（按显示顺序）。
        """
        pending = getattr(self, "_pending_tag_text", None)
        if pending is not None:
            return pending
        owner_key = self._tag_owner_key()
        if owner_key is None:
            return ""
        return self._tag_query().tag_name_string(owner_key, session=self._tag_session())

    @tag_text.setter
    def tag_text(self, value: Any):
        self._pending_tag_text = validate_tag_text(value, self.get_tagging_config().delimiter)

    @property
    def has_pending_tags(self) -> bool:
        """是否有待同步的标签文本"""
        return getattr(self, "_pending_tag_text", None) is not None

    # ==================== 保存与删除 ====================

    def save(self, commit: bool = False):
        """保存对象并同步待写入的标签

        有待同步的标签时，先 flush 拥有者以获得主键，再同步关联表。

        Args:
            commit: 是否立即提交；提交失败或同步失败时回滚
        """
        pending = getattr(self, "_pending_tag_text", None)
        if pending is None:
            return super().save(commit=commit)

        super().save(commit=False)
        session = self._tag_session()
        try:
            session.flush()
            self._last_reconcile = self._tag_lifecycle().after_save(
                self._tag_owner_key(), pending, session=session
            )
            self._pending_tag_text = None
            if commit:
                session.commit()
        except Exception:
            if commit:
                session.rollback()
            raise
        return self

    def delete(self, commit: bool = False):
        """删除对象，删除前清理其全部标签关联并扣减计数"""
        owner_key = self._tag_owner_key()
        if owner_key is not None:
            self._tag_lifecycle().cleanup_owner(owner_key, session=self._tag_session())
        self._pending_tag_text = None
        return super().delete(commit=commit)

    @property
    def last_reconcile(self) -> Optional[ReconcileResult]:
        """最近一次 save() 的标签同步结果"""
        return getattr(self, "_last_reconcile", None)

    # ==================== 实例方法：修改标签 ====================

    def set_tags(self, names: Any, commit: bool = False):
        """替换全部标签并保存

        Example:
            post.set_tags(["python", "web"], commit=True)
        """
        self.tag_text = parse_tag_text(names, self.get_tagging_config().delimiter)
        return self.save(commit=commit)

    def add_tags(self, names: Any, commit: bool = False):
        """追加标签（已有的标签保持原位置）并保存

        Example:
            post.add_tags("django, flask")
        """
        delimiter = self.get_tagging_config().delimiter
        current = parse_tag_text(self.tag_text, delimiter)
        return self.set_tags(current + parse_tag_text(names, delimiter), commit=commit)

    def remove_tags(self, names: Any, commit: bool = False):
        """移除标签并保存"""
        delimiter = self.get_tagging_config().delimiter
        removing = set(parse_tag_text(names, delimiter))
        current = parse_tag_text(self.tag_text, delimiter)
        return self.set_tags([name for name in current if name not in removing], commit=commit)

    def remove_all_tags(self, commit: bool = False):
        """移除全部标签并保存"""
        return self.set_tags([], commit=commit)

    # ==================== 实例方法：查询标签 ====================

    def get_tags(self) -> List[str]:
        """获取已保存的标签名（按显示顺序）"""
        return self._tag_query().tag_names(self._tag_owner_key(), session=self._tag_session())

    def get_tag_objects(self) -> list:
        """获取已保存的标签对象（按显示顺序）"""
        return self._tag_query().tags_of(self._tag_owner_key(), session=self._tag_session())

    def get_tag_links(
        self,
        renderer: Optional[TagLinkRenderer] = None,
        glue: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        """渲染标签链接

        Args:
            renderer: 自定义渲染函数 renderer(tag, options)
            glue: 连接符，默认使用配置中的 link_glue
            options: 链接 HTML 属性，默认使用配置中的 link_options
        """
        config = self.get_tagging_config()
        return tag_links(
            self.get_tag_objects(),
            renderer=renderer,
            glue=config.link_glue if glue is None else glue,
            options=config.link_options if options is None else options,
            route=config.link_route,
            name_attribute=config.name_attribute,
        )

    def has_tag(self, name: str) -> bool:
        """检查是否有指定标签"""
        return name in self.get_tags()

    def get_tag_count(self) -> int:
        """获取标签数量"""
        return len(self.get_tags())

    # ==================== 类方法：按标签查询 ====================

    @classmethod
    def find_by_tag(cls, name: str, extra_filter: ExtraFilter = None, session=None) -> list:
        """查找带有指定标签名的记录

        Example:
            posts = Post.find_by_tag("python")
        """
        config = cls.get_tagging_config()
        session = config.get_session(session)
        tag_key = session.execute(
            select(config.tag_pk_attr).where(config.tag_name_attr == name)
        ).scalar_one_or_none()
        if tag_key is None:
            return []
        return TagQuery(config).owners_of(tag_key, extra_filter, session=session)


@event.listens_for(TaggableMixin, "mapper_configured", propagate=True)
def _register_tagging_config(mapper, cls):
    """映射配置完成时登记标签配置，使标签删除能找到所有关联表"""
    cls.get_tagging_config()
