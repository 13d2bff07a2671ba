"""标签输入组件

TagEditor 渲染一个文本输入框，并附带初始化 jQuery tagEditor 插件的脚本；
TagEditorAsset 描述插件所需的样式与脚本文件。

使用示例:
    editor = TagEditor(model=post, attribute="tag_text", tag_editor_options={
        "autocomplete": {"source": "/api/tags/suggest"},
    })
    html = editor.render()
"""

import json
from typing import Any, Dict, List, Optional

from markupsafe import Markup

from taggable.orm.utils import to_snake_case
from .rendering import render_attributes


class TagEditorAsset:
    """tagEditor 插件资源

    Attributes:
        base_url: 资源文件所在的 URL 前缀
        debug: 为 True 时使用未压缩的插件脚本
    """

    css = ["jquery.tag-editor.css"]
    js = ["jquery.caret.min.js", "jquery.tag-editor.min.js"]
    debug_js = ["jquery.caret.min.js", "jquery.tag-editor.js"]
    # 依赖 jQuery UI（自动补全），由页面自行引入
    depends = ["jquery", "jquery-ui"]

    def __init__(self, base_url: str = "/static/tag-editor", debug: bool = False):
        self.base_url = base_url.rstrip("/")
        self.debug = debug

    @property
    def css_files(self) -> List[str]:
        return [f"{self.base_url}/{name}" for name in self.css]

    @property
    def js_files(self) -> List[str]:
        names = self.debug_js if self.debug else self.js
        return [f"{self.base_url}/{name}" for name in names]

    def render(self) -> Markup:
        """渲染 <link> 与 <script> 标签"""
        tags = [Markup('<link rel="stylesheet" href="{0}">').format(href) for href in self.css_files]
        tags += [Markup('<script src="{0}"></script>').format(src) for src in self.js_files]
        return Markup("\n").join(tags)


def _script_json(data: Any) -> str:
    # 内联在 <script> 中，避免出现 </script>
    return (
        json.dumps(data, ensure_ascii=False)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


class TagEditor:
    """标签输入组件

    可以直接指定 name/value，也可以绑定模型属性（name 为 "Model[attribute]"，
    value 读取模型的属性值）。

    Args:
        name: 输入框 name
        value: 输入框初始值
        model: 绑定的模型对象
        attribute: 绑定的模型属性，默认 tag_text
        options: 输入框的 HTML 属性
        tag_editor_options: 传给 tagEditor 插件的选项
        asset: 资源描述，为 None 时不输出资源标签
    """

    def __init__(
        self,
        name: Optional[str] = None,
        value: Any = None,
        *,
        model: Any = None,
        attribute: str = "tag_text",
        options: Optional[Dict[str, Any]] = None,
        tag_editor_options: Optional[Dict[str, Any]] = None,
        asset: Optional[TagEditorAsset] = None,
    ):
        if name is None and model is None:
            raise ValueError("TagEditor 需要 name 或 model")
        self.model = model
        self.attribute = attribute
        self.name = name or f"{type(model).__name__}[{attribute}]"
        self.value = value
        self.options = dict(options or {})
        self.tag_editor_options = dict(tag_editor_options or {})
        self.asset = asset

    @property
    def input_id(self) -> str:
        if self.options.get("id"):
            return str(self.options["id"])
        if self.model is not None:
            return f"{to_snake_case(type(self.model).__name__)}-{self.attribute}".replace("_", "-")
        return self.name.replace("[]", "").replace("][", "-").replace("[", "-").replace("]", "")

    def get_value(self) -> str:
        if self.value is not None:
            return str(self.value)
        if self.model is not None:
            value = getattr(self.model, self.attribute, "")
            return "" if value is None else str(value)
        return ""

    def render_input(self) -> Markup:
        attributes = {
            key: value for key, value in self.options.items()
            if key not in ("type", "name", "value")
        }
        attributes["id"] = self.input_id
        return Markup('<input type="text" name="{0}" value="{1}"{2}>').format(
            self.name, self.get_value(), render_attributes(attributes)
        )

    def render_script(self) -> Markup:
        return Markup("<script>jQuery({0}).tagEditor({1});</script>").format(
            Markup(_script_json("#" + self.input_id)),
            Markup(_script_json(self.tag_editor_options)),
        )

    def render(self) -> Markup:
        """渲染资源标签（如有）、输入框和初始化脚本"""
        parts = []
        if self.asset is not None:
            parts.append(self.asset.render())
        parts.append(self.render_input())
        parts.append(self.render_script())
        return Markup("\n").join(parts)

    def __html__(self) -> str:
        return self.render()
