"""标签链接渲染

默认把标签渲染为 <a href="{route}?{主键名}={主键值}">{名称}</a>，所有输出均经过 HTML 转义。
调用方可以传入自定义渲染函数 renderer(tag, options) 替换默认实现。
"""

from typing import Any, Callable, Iterable, Mapping, Optional
from urllib.parse import urlencode

from markupsafe import Markup, escape
from sqlalchemy import inspect as sa_inspect

TagLinkRenderer = Callable[[Any, Mapping[str, Any]], str]


def tag_url(tag: Any, route: str = "/tag/view") -> str:
    """生成标签链接地址，查询参数为标签的主键属性"""
    state = sa_inspect(tag)
    mapper = state.mapper
    params = {}
    for column, value in zip(mapper.primary_key, state.identity or ()):
        params[mapper.get_property_by_column(column).key] = value
    if not params:
        return route
    separator = "&" if "?" in route else "?"
    return f"{route}{separator}{urlencode(params)}"


def render_attributes(options: Optional[Mapping[str, Any]]) -> Markup:
    """渲染 HTML 属性，值为 None 或 False 的属性被忽略，True 渲染为布尔属性"""
    parts = []
    for key, value in (options or {}).items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(Markup(" {0}").format(key))
        else:
            parts.append(Markup(' {0}="{1}"').format(key, value))
    return Markup("").join(parts)


def tag_link(
    tag: Any,
    options: Optional[Mapping[str, Any]] = None,
    route: str = "/tag/view",
    name_attribute: str = "name",
) -> Markup:
    """渲染单个标签链接

    Args:
        tag: 标签对象
        options: 额外的 HTML 属性，如 {"class": "tag"}
        route: 链接路由
        name_attribute: 标签名称属性

    Returns:
        转义后的 HTML 片段

    Example:
        >>> tag_link(tag, {"class": "badge"})
        Markup('<a href="/tag/view?id=3" class="badge">python</a>')
    """
    options = dict(options or {})
    href = options.pop("href", None) or tag_url(tag, route)
    return Markup('<a href="{0}"{1}>{2}</a>').format(
        href, render_attributes(options), getattr(tag, name_attribute)
    )


def tag_links(
    tags: Iterable[Any],
    renderer: Optional[TagLinkRenderer] = None,
    glue: str = ", ",
    options: Optional[Mapping[str, Any]] = None,
    route: str = "/tag/view",
    name_attribute: str = "name",
) -> Markup:
    """渲染多个标签链接并用连接符拼接

    Args:
        tags: 标签对象序列
        renderer: 自定义渲染函数 renderer(tag, options)，返回值若不是 Markup 会被转义
        glue: 连接符
        options: 传给渲染函数的 HTML 属性
        route: 默认渲染使用的链接路由
        name_attribute: 默认渲染使用的名称属性
    """
    options = options or {}
    if renderer is None:
        def renderer(tag, opts):
            return tag_link(tag, opts, route=route, name_attribute=name_attribute)
    return escape(glue).join(escape(renderer(tag, options)) for tag in tags)
