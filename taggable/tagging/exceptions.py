"""标签异常定义"""

from typing import Optional, List, Any

from fastapi import status

from taggable.exceptions import BusinessException, ErrorCode, ErrorCodeType


class TaggingError(BusinessException):
    """标签扩展异常基类"""


class ConfigurationError(TaggingError):
    """标签配置错误

    标签模型、关联表或列名配置缺失/无效时抛出，在配置构建阶段立即失败。

    使用示例:
        raise ConfigurationError("关联表缺少列: tag_id", column="tag_id")
    """

    def __init__(
        self,
        message: str = "标签配置无效",
        code: ErrorCodeType = ErrorCode.CONFIGURATION_ERROR,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            **extra
        )
