"""
标签模块 - 自动补全 API

提供标签输入组件使用的名称检索接口，以及标签使用次数查询。
使用动词风格路由，只使用 GET 请求。
"""

from typing import Any, Callable, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from taggable.config import TaggingSettings
from taggable.exceptions import Err, ErrorCode
from taggable.log import get_logger
from taggable.orm import get_db
from taggable.tagging.config import TaggingConfig
from taggable.tagging.query import TagQuery

logger = get_logger()


class TagUsageResponse(BaseModel):
    """标签使用情况"""
    tag_id: Any = Field(..., description="标签主键")
    name: str = Field(..., description="标签名称")
    usage_count: int = Field(..., description="使用次数")


def create_tag_suggest_router(
    config: TaggingConfig,
    like: Optional[str] = None,
    limit: Optional[int] = None,
    max_term_length: Optional[int] = None,
    settings: Optional[TaggingSettings] = None,
    session_dependency: Callable = get_db,
) -> APIRouter:
    """创建标签自动补全路由

    Args:
        config: 标签关联配置
        like: 匹配模式，{term} 为转义后的用户输入，默认 "{term}%"（前缀匹配）
        limit: 最多返回条数，0 表示不限制
        max_term_length: 输入最大长度，超出返回 422
        settings: 未显式传入的参数从 TaggingSettings 读取
        session_dependency: 提供 session 的依赖，默认 get_db

    Returns:
        APIRouter

    生成的路由:
        GET /suggest        - 按名称前缀检索标签，返回标签名数组
        GET /{tag_id}/usage - 获取标签使用次数

    使用示例:
        app.include_router(
            create_tag_suggest_router(Post.get_tagging_config()),
            prefix="/api/tags",
        )
    """
    settings = settings or TaggingSettings()
    like = settings.suggest_like if like is None else like
    limit = settings.suggest_limit if limit is None else limit
    max_term_length = settings.suggest_max_term_length if max_term_length is None else max_term_length

    tag_query = TagQuery(config)
    router = APIRouter()

    @router.get(
        "/suggest",
        response_model=List[str],
        summary="标签自动补全",
        description="按名称检索标签，返回按名称排序的标签名数组"
    )
    def suggest_tags(
        term: str = Query("", description="用户输入"),
        db: Session = Depends(session_dependency),
    ):
        """标签自动补全"""
        if max_term_length and len(term) > max_term_length:
            raise Err.invalid(
                "搜索词过长",
                details=[f"最多 {max_term_length} 个字符"],
                field="term",
            )
        names = tag_query.search(term, like=like, limit=limit, session=db)
        logger.debug(f"标签补全 term={term!r} 返回 {len(names)} 条")
        return names

    @router.get(
        "/{tag_id}/usage",
        response_model=TagUsageResponse,
        summary="获取标签使用次数",
    )
    def get_tag_usage(
        tag_id: int,
        db: Session = Depends(session_dependency),
    ):
        """获取标签使用次数"""
        tag = db.get(config.tag_model, tag_id)
        if tag is None:
            raise Err.not_found(f"标签不存在: {tag_id}", code=ErrorCode.TAG_NOT_FOUND)
        return TagUsageResponse(
            tag_id=tag_id,
            name=getattr(tag, config.name_attribute),
            usage_count=tag_query.usage_count(tag_id, session=db),
        )

    return router
