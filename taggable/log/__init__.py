"""日志模块

提供日志配置与日志记录器获取：

使用示例:
    from taggable.log import setup_logger, get_logger

    # 创建自定义日志记录器
    logger = setup_logger("my_app", level="DEBUG", log_file="logs/app.log")

    # 在模块中获取日志记录器（自动推断模块名）
    logger = get_logger()
"""

from .logger import (
    setup_logger,
    setup_root_logger,
    create_formatter,
    MicrosecondFormatter,
    LoggingConfigProtocol,
    DEFAULT_LOG_FORMAT,
    orm_logger,
    tagging_logger,
    api_logger,
    logger,
    get_logger,
)

__all__ = [
    "setup_logger",
    "setup_root_logger",
    "create_formatter",
    "MicrosecondFormatter",
    "LoggingConfigProtocol",
    "DEFAULT_LOG_FORMAT",
    "orm_logger",
    "tagging_logger",
    "api_logger",
    "logger",
    "get_logger",
]
