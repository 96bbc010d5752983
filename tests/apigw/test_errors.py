"""
Tests pour les enveloppes d'erreur de l'API.

Ce module teste la construction des réponses d'erreur standardisées, l'extraction de l'identifiant
de trace et les gestionnaires enregistrés sur l'application.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel

from fortune_backend.apigw.errors import (
    APIError,
    ErrorCodes,
    bad_request,
    conflict,
    create_error_response,
    extract_trace_id,
    handle_api_error,
    handle_generic_exception,
    handle_http_exception,
    not_found,
    rate_limited,
    register_error_handlers,
    service_unavailable,
    unauthorized,
)
from fortune_backend.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_TOO_MANY_REQUESTS,
    HTTP_UNAUTHORIZED,
    HTTP_UNPROCESSABLE_ENTITY,
)

RETRY_AFTER = 30


def _request(trace_header: str | None = None, request_id: str | None = None) -> MagicMock:
    request = MagicMock()
    request.headers = {"X-Trace-ID": trace_header} if trace_header else {}
    request.state = MagicMock()
    request.state.request_id = request_id
    return request


class TestErrorEnvelope:
    """Test error envelope functionality."""

    def test_create_error_response(self) -> None:
        response = create_error_response(
            status_code=400,
            code="BAD_REQUEST",
            message="Invalid input",
            trace_id="test-trace-123",
            details={"field": "value"},
        )
        assert response.status_code == HTTP_BAD_REQUEST
        content = json.loads(response.body.decode())
        assert content == {
            "code": "BAD_REQUEST",
            "message": "Invalid input",
            "trace_id": "test-trace-123",
            "details": {"field": "value"},
        }

    def test_create_error_response_minimal(self) -> None:
        response = create_error_response(500, "INTERNAL_ERROR", "Something went wrong")
        content = json.loads(response.body.decode())
        assert content["trace_id"] is None
        assert "details" not in content

    def test_extract_trace_id_prefers_header(self) -> None:
        assert extract_trace_id(_request("header-trace", "req-1")) == "header-trace"

    def test_extract_trace_id_from_request_id(self) -> None:
        assert extract_trace_id(_request(request_id="req-1")) == "req-1"

    def test_extract_trace_id_none(self) -> None:
        assert extract_trace_id(_request()) is None

    def test_handle_api_error(self) -> None:
        error = APIError(400, "BAD_REQUEST", "Invalid input", trace_id="error-trace")
        response = handle_api_error(_request(), error)
        content = json.loads(response.body.decode())
        assert response.status_code == HTTP_BAD_REQUEST
        assert content["trace_id"] == "error-trace"

    def test_handle_http_exception(self) -> None:
        response = handle_http_exception(_request(), HTTPException(404, detail="Not found"))
        content = json.loads(response.body.decode())
        assert response.status_code == HTTP_NOT_FOUND
        assert content["code"] == "NOT_FOUND"
        assert content["message"] == "Not found"

    def test_handle_generic_exception(self) -> None:
        response = handle_generic_exception(_request(), ValueError("boom"))
        content = json.loads(response.body.decode())
        assert response.status_code == HTTP_INTERNAL_SERVER_ERROR
        assert content["code"] == "INTERNAL_ERROR"
        assert "boom" not in content["message"]

    def test_convenience_functions(self) -> None:
        assert bad_request("x").status_code == HTTP_BAD_REQUEST
        assert unauthorized("x").code == ErrorCodes.UNAUTHORIZED
        assert unauthorized("x").status_code == HTTP_UNAUTHORIZED
        assert not_found("x").status_code == HTTP_NOT_FOUND
        assert conflict("x", details={"a": 1}).details == {"a": 1}
        assert conflict("x").status_code == HTTP_CONFLICT
        assert service_unavailable("x").status_code == HTTP_SERVICE_UNAVAILABLE

    def test_rate_limited_sets_retry_after(self) -> None:
        error = rate_limited("slow down", retry_after=RETRY_AFTER)
        assert error.status_code == HTTP_TOO_MANY_REQUESTS
        assert error.headers == {"Retry-After": str(RETRY_AFTER)}
        assert error.details == {"retry_after": RETRY_AFTER}


class _Item(BaseModel):
    count: int


def _app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/boom")
    def boom():
        raise RuntimeError("hidden detail")

    @app.get("/missing")
    def missing():
        raise not_found("Nothing here")

    @app.post("/items")
    def items(item: _Item):
        return item

    return app


class TestRegisteredHandlers:
    """Gestionnaires branchés sur une application FastAPI."""

    def test_api_error_envelope(self) -> None:
        r = TestClient(_app()).get("/missing", headers={"X-Trace-ID": "t-1"})
        assert r.status_code == HTTP_NOT_FOUND
        assert r.json() == {"code": "NOT_FOUND", "message": "Nothing here", "trace_id": "t-1"}

    def test_unknown_route(self) -> None:
        r = TestClient(_app()).get("/nope")
        assert r.status_code == HTTP_NOT_FOUND
        assert r.json()["code"] == "NOT_FOUND"

    def test_validation_error(self) -> None:
        r = TestClient(_app()).post("/items", json={"count": "many"})
        assert r.status_code == HTTP_UNPROCESSABLE_ENTITY
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]["errors"][0]["loc"] == ["body", "count"]

    def test_unexpected_error(self) -> None:
        client = TestClient(_app(), raise_server_exceptions=False)
        r = client.get("/boom")
        assert r.status_code == HTTP_INTERNAL_SERVER_ERROR
        assert r.json()["code"] == "INTERNAL_ERROR"
        assert "hidden detail" not in r.text
