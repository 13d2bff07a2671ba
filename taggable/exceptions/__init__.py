"""异常模块

提供业务异常类体系和 FastAPI 异常处理器。

使用示例:
    from taggable.exceptions import Err, register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/tags/{tag_id}")
    def get_tag(tag_id: int):
        raise Err.not_found("标签不存在")
"""

from .exceptions import (
    ErrorCode,
    ErrorCodeType,
    BusinessException,
    ResourceNotFoundException,
    ResourceConflictException,
    ValidationException,
    Err,
)
from .handlers import (
    business_exception_handler,
    register_exception_handlers,
)

__all__ = [
    "ErrorCode",
    "ErrorCodeType",
    "BusinessException",
    "ResourceNotFoundException",
    "ResourceConflictException",
    "ValidationException",
    "Err",
    "business_exception_handler",
    "register_exception_handlers",
]
