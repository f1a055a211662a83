"""Tests for the request logging and error response middlewares."""
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from middleware import INTERNAL_ERROR_MESSAGE, ErrorResponseMiddleware, RequestLoggingMiddleware


@pytest.fixture
def failing_app():
    app = FastAPI()

    @app.get("/ok")
    def ok():
        return {"status": "ok"}

    @app.get("/boom")
    def boom():
        raise RuntimeError("forecast table corrupted")

    app.add_middleware(ErrorResponseMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    return app


class TestErrorResponseMiddleware:
    def test_unhandled_error_becomes_json_500_with_request_id(self, failing_app):
        client = TestClient(failing_app)
        response = client.get("/boom", headers={"X-Request-ID": "req-42"})
        assert response.status_code == 500
        assert response.json() == {"detail": INTERNAL_ERROR_MESSAGE, "request_id": "req-42"}
        assert response.headers["x-request-id"] == "req-42"

    def test_stack_trace_logged_with_request_id(self, failing_app, caplog):
        client = TestClient(failing_app)
        with caplog.at_level(logging.ERROR, logger="farmeraid.http"):
            client.get("/boom", headers={"X-Request-ID": "req-7"})
        records = [r for r in caplog.records if r.getMessage() == "Unhandled exception in request"]
        assert len(records) == 1
        assert records[0].request_id == "req-7"
        assert records[0].path == "/boom"
        assert records[0].exc_info[0] is RuntimeError

    def test_successful_requests_pass_through(self, failing_app):
        response = TestClient(failing_app).get("/ok")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert response.headers.get("x-request-id")
