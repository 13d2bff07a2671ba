"""标签输入组件测试"""

import pytest

from taggable.tagging import TagEditor, TagEditorAsset
from tests.helpers.tagging_models import Post


class TestTagEditorAsset:
    """资源描述测试"""

    def test_files(self):
        asset = TagEditorAsset(base_url="/static/tag-editor/")
        assert asset.css_files == ["/static/tag-editor/jquery.tag-editor.css"]
        assert asset.js_files == [
            "/static/tag-editor/jquery.caret.min.js",
            "/static/tag-editor/jquery.tag-editor.min.js",
        ]
        assert asset.depends == ["jquery", "jquery-ui"]

    def test_debug_uses_unminified_script(self):
        asset = TagEditorAsset(debug=True)
        assert asset.js_files[-1] == "/static/tag-editor/jquery.tag-editor.js"

    def test_render(self):
        html = TagEditorAsset(base_url="/assets").render()
        assert html == (
            '<link rel="stylesheet" href="/assets/jquery.tag-editor.css">\n'
            '<script src="/assets/jquery.caret.min.js"></script>\n'
            '<script src="/assets/jquery.tag-editor.min.js"></script>'
        )


class TestTagEditor:
    """TagEditor 测试"""

    def test_requires_name_or_model(self):
        with pytest.raises(ValueError):
            TagEditor()

    def test_model_binding(self):
        """测试绑定模型属性"""
        post = Post(title="hello")
        post.tag_text = "a, b"
        editor = TagEditor(model=post, options={"class": "form-control"})

        assert editor.name == "Post[tag_text]"
        assert editor.input_id == "post-tag-text"
        assert editor.render_input() == (
            '<input type="text" name="Post[tag_text]" value="a, b" '
            'class="form-control" id="post-tag-text">'
        )

    def test_name_and_value(self):
        editor = TagEditor("Post[tags][]", value='x, "y"')
        assert editor.input_id == "Post-tags"
        assert editor.render_input() == (
            '<input type="text" name="Post[tags][]" value="x, &#34;y&#34;" id="Post-tags">'
        )

    def test_explicit_id_and_reserved_options(self):
        editor = TagEditor("tags", options={"id": "my-tags", "type": "hidden", "value": "ignored"})
        assert editor.input_id == "my-tags"
        assert editor.render_input() == '<input type="text" name="tags" value="" id="my-tags">'

    def test_render_script(self):
        editor = TagEditor("tags", tag_editor_options={
            "delimiter": ",",
            "autocomplete": {"source": "/api/tags/suggest"},
        })
        assert editor.render_script() == (
            '<script>jQuery("#tags").tagEditor('
            '{"delimiter": ",", "autocomplete": {"source": "/api/tags/suggest"}}'
            ");</script>"
        )

    def test_script_options_cannot_close_tag(self):
        editor = TagEditor("tags", tag_editor_options={"placeholder": "</script><b>&"})
        script = editor.render_script()
        assert "</script><b>" not in script
        assert "\\u003c/script\\u003e\\u003cb\\u003e\\u0026" in script

    def test_script_selector_is_js_string(self):
        """测试输入框 id 以 JSON 字符串写入脚本，不做 HTML 实体转义"""
        editor = TagEditor("tags", options={"id": "it's<tags>"})
        script = editor.render_script()
        assert script.startswith('<script>jQuery("#it\'s\\u003ctags\\u003e").tagEditor(')
        assert "&#39;" not in script

    def test_render_with_asset(self):
        editor = TagEditor("tags", asset=TagEditorAsset(base_url="/a"))
        html = editor.render()
        assert html.startswith('<link rel="stylesheet" href="/a/jquery.tag-editor.css">')
        assert '<input type="text" name="tags" value="" id="tags">' in html
        assert html.endswith('<script>jQuery("#tags").tagEditor({});</script>')
        assert editor.__html__() == html
