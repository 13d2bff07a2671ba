"""标签模型 Mixin

为标签模型提供：链接渲染、使用次数、拥有者查询、删除时清理所有关联表。

使用示例:
    class Tag(TagMixin, CoreModel, AbstractTag):
        __tablename__ = "tag"
        __tag_link_route__ = "/tags/view"

    tag = Tag.get_or_create("python")
    tag.get_link({"class": "badge"})
    tag.get_usage_count()
    tag.get_owners(Post, Post.published.is_(True))
    tag.delete(commit=True)   # 同时删除所有关联行
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import inspect as sa_inspect

from .config import TaggingConfig, get_tagging_configs, register_tagging_config
from .exceptions import ConfigurationError
from .lifecycle import cleanup_tag_links
from .query import ExtraFilter, TagQuery
from .rendering import TagLinkRenderer, tag_link


class TagMixin:
    """标签模型 Mixin

    配置属性:
        __tag_relation_models__: 额外的关联配置（TaggingConfig 列表），
            用于没有通过 TaggableMixin 声明的关联表
        __tag_link_route__: 标签链接路由，默认使用关联配置中的 link_route
        __tag_name_attribute__: 标签名称属性，默认 "name"
    """

    __tag_relation_models__: List[TaggingConfig] = []
    __tag_link_route__: Optional[str] = None
    __tag_name_attribute__: str = "name"

    @classmethod
    def get_tagging_configs(cls) -> List[TaggingConfig]:
        """获取引用该标签模型的全部关联配置"""
        for config in getattr(cls, "__tag_relation_models__", None) or ():
            register_tagging_config(config)
        return get_tagging_configs(cls)

    def _tag_key(self) -> Any:
        identity = sa_inspect(self).identity
        return identity[0] if identity else None

    def _tag_session(self):
        state = sa_inspect(self)
        if state.session is not None:
            return state.session
        return self._class_session()

    def _config_for(self, owner_model: Any = None) -> TaggingConfig:
        configs = self.get_tagging_configs()
        if owner_model is not None:
            configs = [c for c in configs if c.owner_model is owner_model]
        if not configs:
            target = owner_model.__name__ if owner_model is not None else type(self).__name__
            raise ConfigurationError(f"没有找到 {target} 的标签关联配置")
        return configs[0]

    # ==================== 链接 ====================

    def get_link_route(self) -> str:
        route = getattr(self, "__tag_link_route__", None)
        if route:
            return route
        configs = self.get_tagging_configs()
        return configs[0].link_route if configs else "/tag/view"

    def get_link(
        self,
        options: Optional[Dict[str, Any]] = None,
        renderer: Optional[TagLinkRenderer] = None,
    ):
        """渲染标签链接

        Args:
            options: 链接 HTML 属性
            renderer: 自定义渲染函数 renderer(tag, options)
        """
        if renderer is not None:
            return renderer(self, options or {})
        return tag_link(
            self,
            options,
            route=self.get_link_route(),
            name_attribute=self.__tag_name_attribute__,
        )

    # ==================== 使用情况 ====================

    def get_usage_count(self) -> int:
        """获取使用次数

        标签模型有计数字段时读取计数，否则统计所有关联表中的关联行数。
        """
        configs = self.get_tagging_configs()
        counted = [c for c in configs if c.counters_enabled]
        if counted:
            return int(getattr(self, counted[0].count_attribute) or 0)
        session = self._tag_session()
        tag_key = self._tag_key()
        if tag_key is None:
            return 0
        seen = set()
        total = 0
        for config in configs:
            if config.junction_table.key in seen:
                continue
            seen.add(config.junction_table.key)
            total += TagQuery(config).link_count(tag_key, session=session)
        return total

    def get_owners(self, owner_model: Any = None, extra_filter: ExtraFilter = None) -> list:
        """获取引用该标签的拥有者

        Args:
            owner_model: 拥有者模型，标签只被一种模型使用时可以省略
            extra_filter: 额外过滤条件

        Example:
            posts = tag.get_owners(Post, Post.published.is_(True))
        """
        config = self._config_for(owner_model)
        return TagQuery(config).owners_of(self._tag_key(), extra_filter, session=self._tag_session())

    # ==================== 删除 ====================

    def delete(self, commit: bool = False):
        """删除标签，同时删除所有关联表中引用它的行"""
        tag_key = self._tag_key()
        session = self._tag_session()
        try:
            if tag_key is not None:
                cleanup_tag_links(tag_key, self.get_tagging_configs(), session=session)
            return super().delete(commit=commit)
        except Exception:
            if commit:
                session.rollback()
            raise

    # ==================== 类方法 ====================

    @classmethod
    def get_or_create(cls, name: str, commit: bool = False):
        """按名称获取标签，不存在则创建

        Example:
            tag = Tag.get_or_create("python", commit=True)
        """
        name_attr = getattr(cls, cls.__tag_name_attribute__)
        tag = cls.query.filter(name_attr == name).first()
        if tag is None:
            tag = cls(**{cls.__tag_name_attribute__: name})
            tag.save(commit=commit)
        return tag
