"""标签文本解析与验证测试"""

import pytest
from pydantic import BaseModel

from taggable.tagging import TagText, canonical_tag_text, parse_tag_text, validate_tag_text


class TestParseTagText:
    """parse_tag_text 测试"""

    def test_split_and_strip(self):
        """测试拆分并去除两端空白"""
        assert parse_tag_text(" red, green ,blue ") == ["red", "green", "blue"]

    def test_drop_empty_entries(self):
        """测试丢弃空名称"""
        assert parse_tag_text("a,, ,b,") == ["a", "b"]
        assert parse_tag_text("") == []
        assert parse_tag_text("  ,  ") == []

    def test_none_is_empty(self):
        assert parse_tag_text(None) == []

    def test_duplicates_keep_first_position(self):
        """测试重复名称只保留第一次出现的位置"""
        assert parse_tag_text("b, a, b, c, a") == ["b", "a", "c"]

    def test_case_sensitive(self):
        """测试名称区分大小写"""
        assert parse_tag_text("Red, red, RED") == ["Red", "red", "RED"]

    def test_sequence_input(self):
        """测试序列输入：丢弃 None 与空元素"""
        assert parse_tag_text([" x ", "y", "", None, "x"]) == ["x", "y"]
        assert parse_tag_text(("a b", "c")) == ["a b", "c"]

    def test_sequence_item_with_delimiter_is_split(self):
        """测试序列元素中的分隔符同样拆分"""
        assert parse_tag_text(["a,b", "c"]) == ["a", "b", "c"]
        assert parse_tag_text(["x; y", "x"], delimiter=";") == ["x", "y"]
        assert parse_tag_text(["a,b"]) == parse_tag_text(validate_tag_text(["a,b"]))

    def test_custom_delimiter(self):
        assert parse_tag_text("a; b;c,d", delimiter=";") == ["a", "b", "c,d"]

    def test_empty_delimiter_raises(self):
        with pytest.raises(ValueError):
            parse_tag_text("a,b", delimiter="")

    def test_canonical_text(self):
        """测试规范化文本"""
        assert canonical_tag_text(" a , b ,a ") == "a,b"
        assert canonical_tag_text("") == ""


class TestValidateTagText:
    """标签文本验证测试（总是接受）"""

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        ("red, green", "red, green"),
        (["red", "green"], "red,green"),
        (("a",), "a"),
        (42, "42"),
    ])
    def test_always_accepts(self, value, expected):
        assert validate_tag_text(value) == expected

    def test_sequence_with_delimiter(self):
        assert validate_tag_text(["a", None, "b"], delimiter=";") == "a;b"

    def test_pydantic_field(self):
        """测试 TagText 作为 pydantic 字段类型"""

        class PostForm(BaseModel):
            title: str
            tag_text: TagText = ""

        assert PostForm(title="t", tag_text=["python", "web"]).tag_text == "python,web"
        assert PostForm(title="t", tag_text=None).tag_text == ""
        assert PostForm(title="t").tag_text == ""
