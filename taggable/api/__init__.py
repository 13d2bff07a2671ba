"""标签 API 模块

使用示例:
    from taggable.api import create_tag_suggest_router

    app.include_router(
        create_tag_suggest_router(Post.get_tagging_config()),
        prefix="/api/tags",
    )
"""

from .suggest_api import TagUsageResponse, create_tag_suggest_router

__all__ = [
    "TagUsageResponse",
    "create_tag_suggest_router",
]
