# app/tests/test_correlation.py
"""
Tests for request correlation.

These tests verify:
1. Client-provided X-Request-Id is echoed in response
2. Missing or unsafe X-Request-Id gets a generated one
3. Log records carry the request id while a request is handled
"""
import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from app.correlation import RequestIdLogFilter, get_request_id, validate_request_id
from app.main import app


@pytest.fixture
def client():
    return TestClient(app)


class TestValidateRequestId:
    def test_valid_uuid(self):
        request_id = "550e8400-e29b-41d4-a716-446655440000"
        assert validate_request_id(request_id) == request_id

    def test_empty_and_none_rejected(self):
        assert validate_request_id("") is None
        assert validate_request_id(None) is None

    def test_length_limit(self):
        assert validate_request_id("a" * 64) == "a" * 64
        assert validate_request_id("a" * 65) is None

    def test_special_chars_rejected(self):
        for bad in ("abc@123", "abc 123", "abc/123", "abc;123", "abc\n123"):
            assert validate_request_id(bad) is None


class TestMiddleware:
    def test_client_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-Id": "req-abc_123"})
        assert response.headers["X-Request-Id"] == "req-abc_123"

    def test_missing_id_is_generated(self, client):
        response = client.get("/health")
        uuid.UUID(response.headers["X-Request-Id"])

    def test_unsafe_id_is_replaced(self, client):
        response = client.get("/health", headers={"X-Request-Id": "bad id;drop"})
        assert response.headers["X-Request-Id"] != "bad id;drop"


class TestLogFilter:
    def test_outside_request_uses_dash(self):
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)

        assert RequestIdLogFilter().filter(record) is True
        assert record.request_id == "-"
        assert get_request_id() is None
