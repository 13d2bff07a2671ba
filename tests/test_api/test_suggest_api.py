"""标签自动补全 API 测试"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, scoped_session

from taggable.api import create_tag_suggest_router
from taggable.config import TaggingSettings
from taggable.exceptions import register_exception_handlers
from taggable.orm import Base, CoreModel, get_db
from tests.helpers.tagging_models import Post, Tag


class TestSuggestApi:
    """自动补全接口测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, memory_engine):
        """初始化数据库与测试应用"""
        Base.metadata.create_all(bind=memory_engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=memory_engine)
        self.session_scope = scoped_session(SessionLocal)
        CoreModel.query = self.session_scope.query_property()
        self.session = self.session_scope()

        Post(title="p1", tag_text="python, pytest, web").save(commit=True)
        Post(title="p2", tag_text="python, 50%_off").save(commit=True)
        yield
        self.session_scope.remove()

    def make_client(self, **kwargs) -> TestClient:
        app = FastAPI()
        register_exception_handlers(app)
        app.include_router(
            create_tag_suggest_router(Post.get_tagging_config(), **kwargs),
            prefix="/api/tags",
        )

        def override_get_db():
            yield self.session

        app.dependency_overrides[get_db] = override_get_db
        return TestClient(app)

    def test_suggest_prefix(self):
        client = self.make_client()
        response = client.get("/api/tags/suggest", params={"term": "py"})
        assert response.status_code == 200
        assert response.json() == ["pytest", "python"]

    def test_suggest_no_match(self):
        client = self.make_client()
        assert client.get("/api/tags/suggest", params={"term": "zzz"}).json() == []

    def test_suggest_empty_term(self):
        client = self.make_client(limit=2)
        assert client.get("/api/tags/suggest").json() == ["50%_off", "pytest"]

    def test_suggest_wildcards_are_literal(self):
        client = self.make_client()
        assert client.get("/api/tags/suggest", params={"term": "50%"}).json() == ["50%_off"]
        assert client.get("/api/tags/suggest", params={"term": "%"}).json() == []

    def test_suggest_custom_pattern(self):
        client = self.make_client(like="%{term}%")
        assert client.get("/api/tags/suggest", params={"term": "e"}).json() == ["pytest", "web"]

    def test_suggest_settings_defaults(self):
        client = self.make_client(settings=TaggingSettings(suggest_limit=1))
        assert client.get("/api/tags/suggest", params={"term": "p"}).json() == ["pytest"]

    def test_suggest_term_too_long(self):
        client = self.make_client(max_term_length=5)
        response = client.get("/api/tags/suggest", params={"term": "abcdefg"})
        assert response.status_code == 422
        body = response.json()
        assert body["status"] == "error"
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["message"] == "搜索词过长"

    def test_usage(self):
        client = self.make_client()
        python = Tag.get_by_name("python")

        response = client.get(f"/api/tags/{python.id}/usage")

        assert response.status_code == 200
        assert response.json() == {"tag_id": python.id, "name": "python", "usage_count": 2}

    def test_usage_not_found(self):
        client = self.make_client()
        response = client.get("/api/tags/9999/usage")
        assert response.status_code == 404
        assert response.json()["error_code"] == "TAG_NOT_FOUND"
