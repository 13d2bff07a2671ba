"""ORM 模块

提供标签扩展运行所需的模型基类与会话管理。

使用示例:
    from taggable.orm import CoreModel, init_database, get_db

    init_database("sqlite:///./app.db")
"""

from .id_model import Base, IdModel
from .core_model import CoreModel
from .db_session import (
    db_manager,
    init_database,
    get_engine,
    get_db,
    db_session_scope,
    with_db_session,
    on_request_end,
    enable_sqlite_savepoints,
)
from .utils import to_snake_case

__all__ = [
    "Base",
    "IdModel",
    "CoreModel",
    "db_manager",
    "init_database",
    "get_engine",
    "get_db",
    "db_session_scope",
    "with_db_session",
    "on_request_end",
    "enable_sqlite_savepoints",
    "to_snake_case",
]
