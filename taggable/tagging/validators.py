"""标签文本字段验证

标签文本字段总是通过验证：任何输入都会被转换为字符串，实际的规范化在同步时完成。

使用示例:
    from pydantic import BaseModel
    from taggable.tagging import TagText

    class PostForm(BaseModel):
        title: str
        tag_text: TagText = ""

    PostForm(title="a", tag_text=["python", "web"]).tag_text  # "python,web"
"""

from typing import Any

from pydantic import BeforeValidator
from typing_extensions import Annotated

from .parser import DEFAULT_DELIMITER


def validate_tag_text(value: Any, delimiter: str = DEFAULT_DELIMITER) -> str:
    """标签文本验证器（总是接受）

    - None 视为空字符串
    - 字符串原样返回
    - 序列用分隔符连接
    - 其他值转换为字符串
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return delimiter.join(str(item) for item in value if item is not None)
    return str(value)


TagText = Annotated[str, BeforeValidator(validate_tag_text)]
