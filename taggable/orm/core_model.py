"""
ORM基础模型

提供常用的CRUD操作、批量操作和序列化功能
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, delete, func, inspect, update
from sqlalchemy.orm import Mapped, mapped_column, declared_attr, Session, Query

if TYPE_CHECKING:
    from typing_extensions import Self

from .id_model import IdModel
from .utils import to_snake_case


class CoreModel(IdModel):
    """ORM基础模型类

    继承自 IdModel，提供功能：
    - 自增主键（继承自 IdModel）
    - 自动表名生成（驼峰转下划线）
    - 常用CRUD操作方法
    - 批量操作方法
    - 数据序列化方法

    使用示例:
        from taggable.orm import CoreModel, init_database

        init_database("sqlite:///./app.db")

        class Post(CoreModel):
            title: Mapped[str] = mapped_column(String(100))

        post = Post(title="hello")
        post.save(commit=True)
    """
    __abstract__ = True

    # query 属性在 init_database() 或测试中通过 scoped_session.query_property() 设置
    query: ClassVar[Optional[Query]] = None

    # 自动根据类名创建表名
    @declared_attr.directive
    def __tablename__(cls) -> str:
        """驼峰命名转下划线"""
        name = cls.__name__
        if '_' in name:
            raise ValueError(f'{name}字符中包含下划线，无法转换')
        return to_snake_case(name)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        comment="创建时间"
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
        onupdate=func.now(),
        comment="更新时间"
    )

    # 系统字段列表（构造时自动忽略这些字段）
    _system_fields: ClassVar[set] = {'id', 'created_at', 'updated_at'}

    def __init__(self, **kwargs):
        """初始化模型实例

        自动忽略系统字段（id, created_at, updated_at）。
        """
        for field in self._system_fields:
            kwargs.pop(field, None)
        super().__init__(**kwargs)

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.id}>"

    @property
    def session(self) -> Session:
        """获取当前session

        对象已属于某个 session 时直接返回该 session；
        否则优先从 query 属性获取，最后回退到全局 scoped_session。
        """
        state = inspect(self)
        if state.session is not None:
            return state.session
        return type(self)._class_session()

    @classmethod
    def _class_session(cls) -> Session:
        if cls.query is not None:
            return cls.query.session
        from .db_session import db_manager
        return db_manager.get_session()

    # ==================== CRUD 操作方法 ====================

    def save(self, commit: bool = False) -> Self:
        """保存对象（自动判断新增或更新）

        Args:
            commit: 是否立即提交，默认False

        Returns:
            self: 返回自身，支持链式调用
        """
        # session.add() 是幂等的，对已在 session 中的对象调用是安全的
        self.session.add(self)
        self._commit_if(commit)
        return self

    @classmethod
    def save_all(cls, objects: list, commit: bool = False):
        """批量保存对象（新增或更新）

        Args:
            objects: 对象列表
            commit: 是否立即提交，默认False

        Returns:
            保存的对象列表
        """
        if not objects:
            return objects
        cls._class_session().add_all(objects)
        cls._cls_commit_if(commit)
        return objects

    def update(self, commit: bool = False, **kwargs) -> Self:
        """更新对象属性

        Args:
            commit: 是否立即提交，默认False
            **kwargs: 要更新的属性键值对

        Returns:
            self: 返回自身，支持链式调用
        """
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
        self._commit_if(commit)
        return self

    def delete(self, commit: bool = False):
        """删除对象"""
        self.session.delete(self)
        self._commit_if(commit)

    @classmethod
    def delete_all(cls, objects: list, commit: bool = False):
        """批量删除对象

        逐个调用 delete()，子类重写的删除逻辑同样生效。
        """
        if not objects:
            return
        for obj in objects:
            obj.delete()
        cls._cls_commit_if(commit)

    def refresh(self, attribute_names: list = None) -> Self:
        """从数据库重新加载对象状态"""
        self.session.refresh(self, attribute_names=attribute_names)
        return self

    @classmethod
    def get(cls, id: int):
        """根据ID获取对象，不存在返回None"""
        return cls._class_session().get(cls, id)

    @classmethod
    def get_list_by_conditions(cls, conditions: dict):
        """根据条件获取列表"""
        return cls.query.filter_by(**conditions).all()

    @classmethod
    def get_all(cls):
        """获取所有记录"""
        return cls.query.all()

    # ==================== 序列化方法 ====================

    def to_dict(self, exclude: set = None) -> dict:
        """转换为字典

        Args:
            exclude: 需要排除的字段集合

        Returns:
            字典格式的对象数据
        """
        exclude = exclude or set()
        return {
            c.key: getattr(self, c.key)
            for c in inspect(self).mapper.column_attrs
            if c.key not in exclude
        }

    # ==================== 批量操作方法 ====================

    @classmethod
    def bulk_update(cls, filters: dict, values: dict, commit: bool = False) -> int:
        """批量更新数据

        Args:
            filters: 过滤条件字典
            values: 要更新的字段和值
            commit: 是否自动提交

        Returns:
            受影响的行数
        """
        stmt = update(cls)
        for key, value in filters.items():
            column = getattr(cls, key, None)
            if column is not None:
                stmt = stmt.where(column == value)

        stmt = stmt.values(**values)
        result = cls._class_session().execute(stmt)
        cls._cls_commit_if(commit)
        return result.rowcount

    @classmethod
    def bulk_update_by_ids(cls, ids: list, values: dict, commit: bool = False) -> int:
        """根据ID列表批量更新"""
        if not ids:
            return 0

        stmt = update(cls).where(cls.id.in_(ids)).values(**values)
        result = cls._class_session().execute(stmt)
        cls._cls_commit_if(commit)
        return result.rowcount

    @classmethod
    def bulk_delete(cls, filters: dict, commit: bool = False) -> int:
        """批量删除数据（物理删除）

        ⚠️ 警告：此操作直接执行 DELETE，不经过模型的 delete() 方法，
        标签等关联数据不会被清理。
        """
        stmt = delete(cls)
        for key, value in filters.items():
            column = getattr(cls, key, None)
            if column is not None:
                stmt = stmt.where(column == value)

        result = cls._class_session().execute(stmt)
        cls._cls_commit_if(commit)
        return result.rowcount

    @classmethod
    def bulk_delete_by_ids(cls, ids: list, commit: bool = False) -> int:
        """根据ID列表批量删除（同样不经过 delete() 方法）"""
        if not ids:
            return 0

        stmt = delete(cls).where(cls.id.in_(ids))
        result = cls._class_session().execute(stmt)
        cls._cls_commit_if(commit)
        return result.rowcount

    # ==================== 提交控制 ====================

    def _commit_if(self, commit: bool = False):
        """实例方法：根据参数决定是否提交"""
        if commit:
            self.session.commit()

    @classmethod
    def _cls_commit_if(cls, commit: bool = False):
        """类方法：根据参数决定是否提交"""
        if commit:
            cls._class_session().commit()
