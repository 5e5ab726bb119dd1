"""
Tests for request logging middleware, structured log output and health check
"""

import json
import logging

from starlette.requests import Request

from tenant_iam.auth import create_access_token
from tenant_iam.claims import Claims
from tenant_iam.middleware.logging import RequestIdFilter, StructuredFormatter, audit_subject, request_id_var


def make_request(headers: dict[str, str]) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


class TestStructuredFormatter:
    def test_emits_json_with_extra_fields(self):
        record = logging.LogRecord("tenant_iam.access", logging.INFO, __file__, 1, "GET /x - 200", None, None)
        record.request_id = "req-1"
        record.subject = "user-1"
        record.status_code = 200

        data = json.loads(StructuredFormatter().format(record))
        assert data["message"] == "GET /x - 200"
        assert data["level"] == "INFO"
        assert data["request_id"] == "req-1"
        assert data["subject"] == "user-1"
        assert data["status_code"] == 200

    def test_request_id_filter(self):
        token = request_id_var.set("abc")
        try:
            record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
            assert RequestIdFilter().filter(record)
            assert record.request_id == "abc"
        finally:
            request_id_var.reset(token)


class TestAuditSubject:
    def test_valid_bearer_token(self):
        token = create_access_token(Claims.build(sub="user-9", tenant_id="t-1"))
        assert audit_subject(make_request({"Authorization": f"Bearer {token}"})) == ("user-9", "t-1")

    def test_anonymous(self):
        assert audit_subject(make_request({})) == (None, None)

    def test_invalid_token_is_anonymous(self):
        assert audit_subject(make_request({"Authorization": "Bearer nope"})) == (None, None)


class TestRequestLogging:
    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    async def test_request_id_is_generated(self, client):
        response = await client.get("/health")
        assert response.headers["X-Request-ID"]

    async def test_access_log_records_subject(self, seeded, client, headers_for, caplog):
        user = seeded.users["companyadmin"]
        with caplog.at_level(logging.INFO, logger="tenant_iam.access"):
            await client.get("/api/v1/auth/profile", headers=headers_for(user))

        records = [r for r in caplog.records if r.name == "tenant_iam.access"]
        assert records
        assert records[-1].subject == user.id
        assert records[-1].status_code == 200


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "ok"
