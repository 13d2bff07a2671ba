"""业务异常与异常处理器测试"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from taggable.exceptions import (
    BusinessException,
    Err,
    ErrorCode,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
    register_exception_handlers,
)
from taggable.tagging import ConfigurationError, TaggingError


class TestBusinessException:
    """异常类测试"""

    def test_defaults(self):
        exc = BusinessException("操作失败")
        assert exc.code == ErrorCode.BUSINESS_ERROR
        assert exc.status_code == 400
        assert exc.details == []
        assert str(exc) == "操作失败"

    def test_to_dict_copies(self):
        details = ["第一条"]
        exc = BusinessException("失败", details=details, owner_id=3)
        data = exc.to_dict()
        data["details"].append("第二条")

        assert data["extra"] == {"owner_id": 3}
        assert exc.details == ["第一条"]

    def test_repr(self):
        text = repr(BusinessException("x"))
        assert text.startswith("BusinessException(message='x', code=")
        assert text.endswith("status_code=400)")

    @pytest.mark.parametrize("exc,status_code,code", [
        (ResourceNotFoundException(), 404, ErrorCode.RESOURCE_NOT_FOUND),
        (ResourceConflictException(), 409, ErrorCode.RESOURCE_CONFLICT),
        (ValidationException(), 422, ErrorCode.VALIDATION_ERROR),
        (ConfigurationError(), 500, ErrorCode.CONFIGURATION_ERROR),
    ])
    def test_subclasses(self, exc, status_code, code):
        assert exc.status_code == status_code
        assert exc.code == code

    def test_tagging_errors_are_business_exceptions(self):
        assert issubclass(ConfigurationError, TaggingError)
        assert issubclass(TaggingError, BusinessException)

    def test_err_shortcuts(self):
        assert isinstance(Err.not_found(), ResourceNotFoundException)
        assert isinstance(Err.conflict(), ResourceConflictException)
        assert isinstance(Err.invalid(), ValidationException)
        fail = Err.fail("失败", code=ErrorCode.OPERATION_FAILED)
        assert fail.code == "OPERATION_FAILED"
        assert Err.not_found("标签不存在", code=ErrorCode.TAG_NOT_FOUND).code == ErrorCode.TAG_NOT_FOUND


class TestExceptionHandler:
    """异常处理器测试"""

    @pytest.fixture
    def client(self):
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/missing")
        def missing():
            raise Err.not_found("标签不存在", code=ErrorCode.TAG_NOT_FOUND, tag_id=7)

        @app.get("/invalid")
        def invalid():
            raise Err.invalid("搜索词过长", details=["最多 64 个字符"])

        return TestClient(app)

    def test_not_found_response(self, client, monkeypatch):
        monkeypatch.delenv("DEBUG", raising=False)
        response = client.get("/missing")

        assert response.status_code == 404
        assert response.json() == {
            "status": "error",
            "message": "标签不存在",
            "msg_details": [],
            "data": {},
            "error_code": "TAG_NOT_FOUND",
        }

    def test_details(self, client):
        body = client.get("/invalid").json()
        assert body["msg_details"] == ["最多 64 个字符"]
        assert body["error_code"] == "VALIDATION_ERROR"

    def test_debug_info(self, client, monkeypatch):
        monkeypatch.setenv("DEBUG", "true")
        body = client.get("/missing").json()
        assert body["debug_info"] == {"tag_id": 7}
