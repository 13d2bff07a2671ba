"""CoreModel 测试

测试模型基类的 CRUD、批量操作与序列化。
"""

import pytest
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, sessionmaker, scoped_session

from taggable.orm import Base, CoreModel, to_snake_case


class BlogArticle(CoreModel):
    """自动表名：blog_article"""

    title: Mapped[str] = mapped_column(String(200))
    views: Mapped[int] = mapped_column(Integer, default=0)


class TestToSnakeCase:
    """命名转换测试"""

    @pytest.mark.parametrize("name,expected", [
        ("PostTag", "post_tag"),
        ("APIClient", "api_client"),
        ("Tag", "tag"),
        ("HTTPRequestLog", "http_request_log"),
    ])
    def test_convert(self, name, expected):
        assert to_snake_case(name) == expected

    def test_remove_model_suffix(self):
        assert to_snake_case("TagModel", remove_model_suffix=True) == "tag"


class TestCoreModel:
    """CRUD 测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, memory_engine):
        """初始化数据库"""
        Base.metadata.create_all(bind=memory_engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=memory_engine)
        self.session_scope = scoped_session(SessionLocal)
        CoreModel.query = self.session_scope.query_property()
        yield
        self.session_scope.remove()

    def test_auto_tablename(self):
        assert BlogArticle.__tablename__ == "blog_article"

    def test_save_and_get(self):
        article = BlogArticle(title="hello").save(commit=True)

        loaded = BlogArticle.get(article.id)

        assert loaded.title == "hello"
        assert loaded.views == 0
        assert loaded.created_at is not None

    def test_system_fields_ignored(self):
        article = BlogArticle(id=99, title="x", created_at=None)
        article.save(commit=True)
        assert article.id == 1

    def test_update(self):
        article = BlogArticle(title="old").save(commit=True)
        article.update(commit=True, title="new", unknown="ignored")
        assert BlogArticle.get(article.id).title == "new"

    def test_delete(self):
        article = BlogArticle(title="gone").save(commit=True)
        article_id = article.id
        article.delete(commit=True)
        assert BlogArticle.get(article_id) is None

    def test_get_all_and_conditions(self):
        BlogArticle.save_all([BlogArticle(title="a"), BlogArticle(title="b")], commit=True)
        assert len(BlogArticle.get_all()) == 2
        assert [a.title for a in BlogArticle.get_list_by_conditions({"title": "b"})] == ["b"]

    def test_to_dict(self):
        article = BlogArticle(title="hello").save(commit=True)
        data = article.to_dict(exclude={"created_at", "updated_at"})
        assert data == {"id": article.id, "title": "hello", "views": 0}

    def test_refresh(self):
        article = BlogArticle(title="hello").save(commit=True)
        BlogArticle.bulk_update_by_ids([article.id], {"views": 5}, commit=True)
        assert article.refresh().views == 5

    def test_bulk_update(self):
        BlogArticle.save_all([BlogArticle(title="a"), BlogArticle(title="a"), BlogArticle(title="b")], commit=True)
        assert BlogArticle.bulk_update({"title": "a"}, {"views": 1}, commit=True) == 2
        assert BlogArticle.bulk_update_by_ids([], {"views": 1}) == 0

    def test_bulk_delete(self):
        articles = BlogArticle.save_all([BlogArticle(title="a"), BlogArticle(title="b")], commit=True)
        assert BlogArticle.bulk_delete({"title": "a"}, commit=True) == 1
        assert BlogArticle.bulk_delete_by_ids([articles[1].id], commit=True) == 1
        assert BlogArticle.get_all() == []
