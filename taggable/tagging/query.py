"""标签查询

TagQuery 提供标签关联的读取：拥有者的标签（按显示顺序）、标签的拥有者、标签使用次数，
以及自动补全使用的名称前缀检索。
"""

from typing import Any, Callable, List, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement, Select

from .config import TaggingConfig
from .exceptions import ConfigurationError

ExtraFilter = Union[ColumnElement, Callable[[Select], Select], None]

LIKE_ESCAPE = "\\"


def escape_like(term: str, escape: str = LIKE_ESCAPE) -> str:
    """转义 LIKE 通配符（%、_ 以及转义符本身）"""
    return (
        term.replace(escape, escape + escape)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )


class TagQuery:
    """标签查询

    使用示例:
        query = TagQuery(config)

        query.tags_of(post.id)              # [<Tag red>, <Tag green>]
        query.tag_name_string(post.id)      # "red,green"
        query.owners_of(tag.id, Post.published.is_(True))
        query.usage_count(tag.id)           # 3
    """

    def __init__(self, config: TaggingConfig):
        self.config = config

    def _links_of(self, owner_key: Any, *entities) -> Select:
        cfg = self.config
        return (
            select(*(entities or (cfg.tag_model,)))
            .join_from(cfg.tag_model, cfg.junction_table, cfg.tag_key_col == cfg.tag_pk_attr)
            .where(cfg.owner_key_col == owner_key)
            .order_by(*cfg.link_order_by())
        )

    def tags_of(self, owner_key: Any, session: Optional[Session] = None) -> list:
        """获取拥有者的标签对象，按显示顺序排列

        Args:
            owner_key: 拥有者主键
            session: 使用的 session

        Returns:
            标签对象列表，没有标签时返回空列表
        """
        if owner_key is None:
            return []
        session = self.config.get_session(session)
        return list(session.scalars(self._links_of(owner_key)))

    def tag_names(self, owner_key: Any, session: Optional[Session] = None) -> List[str]:
        """获取拥有者的标签名列表，按显示顺序排列"""
        if owner_key is None:
            return []
        cfg = self.config
        session = cfg.get_session(session)
        return list(session.scalars(self._links_of(owner_key, cfg.tag_name_attr)))

    def tag_name_string(
        self,
        owner_key: Any,
        delimiter: Optional[str] = None,
        session: Optional[Session] = None,
    ) -> str:
        """获取拥有者的标签文本

        Args:
            owner_key: 拥有者主键
            delimiter: 分隔符，默认使用配置中的分隔符

        Returns:
            用分隔符连接的标签名，没有标签时返回空字符串
        """
        if delimiter is None:
            delimiter = self.config.delimiter
        return delimiter.join(self.tag_names(owner_key, session=session))

    def owners_of(
        self,
        tag_key: Any,
        extra_filter: ExtraFilter = None,
        session: Optional[Session] = None,
    ) -> list:
        """获取引用该标签的拥有者（不保证顺序）

        Args:
            tag_key: 标签主键
            extra_filter: 额外过滤条件，可以是 SQL 表达式，
                也可以是接收并返回 select 语句的函数
            session: 使用的 session

        Returns:
            拥有者对象列表

        Raises:
            ConfigurationError: 未配置 owner_model
        """
        cfg = self.config
        if cfg.owner_model is None:
            raise ConfigurationError("查询标签拥有者需要配置 owner_model")
        stmt = (
            select(cfg.owner_model)
            .join_from(cfg.owner_model, cfg.junction_table, cfg.owner_key_col == cfg.owner_pk)
            .where(cfg.tag_key_col == tag_key)
        )
        if callable(extra_filter):
            stmt = extra_filter(stmt)
        elif extra_filter is not None:
            stmt = stmt.where(extra_filter)
        session = cfg.get_session(session)
        return list(session.scalars(stmt).unique())

    def usage_count(self, tag_key: Any, session: Optional[Session] = None) -> int:
        """获取标签使用次数

        启用计数时读取标签上的计数属性，否则统计关联行数。
        """
        cfg = self.config
        if not cfg.counters_enabled:
            return self.link_count(tag_key, session=session)
        session = cfg.get_session(session)
        value = session.execute(
            select(cfg.tag_count_attr).where(cfg.tag_pk_attr == tag_key)
        ).scalar_one_or_none()
        return int(value or 0)

    def link_count(self, tag_key: Any, session: Optional[Session] = None) -> int:
        """统计引用该标签的关联行数"""
        cfg = self.config
        session = cfg.get_session(session)
        stmt = select(func.count()).select_from(cfg.junction_table).where(cfg.tag_key_col == tag_key)
        return session.execute(stmt).scalar_one()

    def search(
        self,
        term: str,
        like: str = "{term}%",
        limit: Optional[int] = None,
        session: Optional[Session] = None,
    ) -> List[str]:
        """按名称检索标签（自动补全）

        Args:
            term: 用户输入，其中的 LIKE 通配符会被转义
            like: 匹配模式，{term} 会被替换为转义后的输入
            limit: 最多返回条数，None 或 0 表示不限制

        Returns:
            按名称排序的标签名列表
        """
        cfg = self.config
        pattern = like.replace("{term}", escape_like(term or ""))
        stmt = (
            select(cfg.tag_name_attr)
            .where(cfg.tag_name_attr.like(pattern, escape=LIKE_ESCAPE))
            .order_by(cfg.tag_name_attr.asc())
        )
        if limit:
            stmt = stmt.limit(limit)
        session = cfg.get_session(session)
        return list(session.scalars(stmt))
