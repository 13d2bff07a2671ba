"""标签关联配置

TaggingConfig 描述一组「拥有者 ↔ 标签」关联：标签模型、关联表以及各列/属性名。
配置在构建时完成校验，任何缺失或无效的设置都会立即抛出 ConfigurationError。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, Table
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper, QueryableAttribute, Session

from .exceptions import ConfigurationError
from .parser import DEFAULT_DELIMITER


def _single_pk(model: Any, role: str) -> Column:
    mapper = sa_inspect(model, raiseerr=False)
    if not isinstance(mapper, Mapper):
        raise ConfigurationError(f"{role} {model!r} 不是已映射的 SQLAlchemy 模型", role=role)
    if len(mapper.primary_key) != 1:
        raise ConfigurationError(f"{role} {model.__name__} 必须只有一个主键列", role=role)
    return mapper.primary_key[0]


@dataclass(eq=False)
class TaggingConfig:
    """标签关联配置

    Attributes:
        tag_model: 标签模型类（必填）
        junction: 关联表，可以是映射类或 sqlalchemy.Table（必填）
        owner_model: 拥有者模型类，查询 owners_of 时需要
        owner_key_column: 关联表中拥有者主键列名
        tag_key_column: 关联表中标签主键列名
        order_column: 关联表中排序列名，None 表示不维护顺序
        name_attribute: 标签模型中名称属性名
        count_attribute: 标签模型中使用次数属性名，None 表示不维护计数
        delimiter: 标签文本分隔符
        link_route: 标签链接路由
        link_glue: 多个标签链接之间的连接符
        link_options: 标签链接的额外 HTML 属性

    使用示例:
        config = TaggingConfig(
            tag_model=Tag,
            junction=PostTag,
            owner_model=Post,
        )

        # 不维护计数和顺序
        config = TaggingConfig(
            tag_model=Tag,
            junction=post_tag_table,
            order_column=None,
            count_attribute=None,
        )
    """
    tag_model: Any = None
    junction: Any = None
    owner_model: Any = None
    owner_key_column: str = "owner_id"
    tag_key_column: str = "tag_id"
    order_column: Optional[str] = "sort_order"
    name_attribute: str = "name"
    count_attribute: Optional[str] = "count"
    delimiter: str = DEFAULT_DELIMITER
    link_route: str = "/tag/view"
    link_glue: str = ", "
    link_options: Dict[str, Any] = field(default_factory=dict)

    junction_table: Table = field(init=False, repr=False)
    tag_pk: Column = field(init=False, repr=False)
    owner_pk: Optional[Column] = field(init=False, repr=False, default=None)

    def __post_init__(self):
        if self.tag_model is None:
            raise ConfigurationError("未设置标签模型 tag_model")
        if self.junction is None:
            raise ConfigurationError("未设置关联表 junction")
        if not self.delimiter:
            raise ConfigurationError("分隔符 delimiter 不能为空")

        self.tag_pk = _single_pk(self.tag_model, "标签模型")
        if self.owner_model is not None:
            self.owner_pk = _single_pk(self.owner_model, "拥有者模型")

        if isinstance(self.junction, Table):
            self.junction_table = self.junction
        elif isinstance(getattr(self.junction, "__table__", None), Table):
            self.junction_table = self.junction.__table__
        else:
            raise ConfigurationError(f"关联表 {self.junction!r} 既不是 Table 也不是映射类")

        for column in (self.owner_key_column, self.tag_key_column, self.order_column):
            if column is not None and column not in self.junction_table.c:
                raise ConfigurationError(
                    f"关联表 {self.junction_table.name} 缺少列: {column}",
                    column=column,
                )

        for attribute in (self.name_attribute, self.count_attribute):
            if attribute is None:
                continue
            if not isinstance(getattr(self.tag_model, attribute, None), QueryableAttribute):
                raise ConfigurationError(
                    f"标签模型 {self.tag_model.__name__} 缺少属性: {attribute}",
                    attribute=attribute,
                )

    @classmethod
    def from_settings(cls, settings: Any = None, **kwargs) -> "TaggingConfig":
        """使用 TaggingSettings 中的默认值构建配置

        Args:
            settings: TaggingSettings 实例，不传则从环境变量读取
            **kwargs: 其余配置项，优先于 settings

        使用示例:
            config = TaggingConfig.from_settings(
                settings.tagging, tag_model=Tag, junction=PostTag
            )
        """
        if settings is None:
            from taggable.config import TaggingSettings
            settings = TaggingSettings()
        kwargs.setdefault("delimiter", settings.delimiter)
        kwargs.setdefault("link_route", settings.link_route)
        kwargs.setdefault("link_glue", settings.link_glue)
        return cls(**kwargs)

    # ==================== 列与属性 ====================

    @property
    def owner_key_col(self) -> Column:
        return self.junction_table.c[self.owner_key_column]

    @property
    def tag_key_col(self) -> Column:
        return self.junction_table.c[self.tag_key_column]

    @property
    def order_col(self) -> Optional[Column]:
        if self.order_column is None:
            return None
        return self.junction_table.c[self.order_column]

    @property
    def tag_pk_attr(self) -> QueryableAttribute:
        """标签主键对应的 ORM 属性"""
        mapper = sa_inspect(self.tag_model)
        return getattr(self.tag_model, mapper.get_property_by_column(self.tag_pk).key)

    @property
    def tag_name_attr(self) -> QueryableAttribute:
        return getattr(self.tag_model, self.name_attribute)

    @property
    def tag_count_attr(self) -> Optional[QueryableAttribute]:
        if self.count_attribute is None:
            return None
        return getattr(self.tag_model, self.count_attribute)

    @property
    def counters_enabled(self) -> bool:
        return self.count_attribute is not None

    @property
    def ordering_enabled(self) -> bool:
        return self.order_column is not None

    def link_order_by(self) -> list:
        """关联行的排序列：有排序列时按排序列，否则按关联表主键"""
        if self.order_column is not None:
            return [self.order_col.asc()]
        pk_columns = list(self.junction_table.primary_key.columns)
        return pk_columns or [self.tag_key_col]

    def get_session(self, session: Optional[Session] = None) -> Session:
        """获取执行标签操作的 session

        优先级：显式传入 > 标签模型的 query.session > 全局 scoped_session
        """
        if session is not None:
            return session
        query = getattr(self.tag_model, "query", None)
        if query is not None:
            return query.session
        from taggable.orm.db_session import db_manager
        return db_manager.get_session()


# ==================== 配置注册表 ====================

# 标签模型 -> 使用该标签模型的关联配置列表
_tagging_registry: Dict[Any, List[TaggingConfig]] = {}


def register_tagging_config(config: TaggingConfig) -> TaggingConfig:
    """登记关联配置，供标签模型删除时清理所有关联表"""
    configs = _tagging_registry.setdefault(config.tag_model, [])
    if config not in configs:
        configs.append(config)
    return config


def get_tagging_configs(tag_model: Any) -> List[TaggingConfig]:
    """获取使用该标签模型（含其父类）的全部关联配置"""
    configs: List[TaggingConfig] = []
    for klass in getattr(tag_model, "__mro__", (tag_model,)):
        configs.extend(_tagging_registry.get(klass, ()))
    return configs
