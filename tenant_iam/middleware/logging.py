"""
Access logging for the IAM API.

Each request gets an ``X-Request-ID`` (taken from the caller or generated),
and one line in the ``tenant_iam.access`` log naming the bearer subject and
tenant, so authorization decisions can be traced back to a caller.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from tenant_iam.auth import decode_access_token
from tenant_iam.exceptions import AuthenticationError

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

EXTRA_FIELDS = ("subject", "tenant_id", "method", "path", "status_code", "duration_ms", "client_ip")
QUIET_PATHS = frozenset({"/health"})
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Stamp every record with the id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", ""),
        }
        entry.update({field: getattr(record, field) for field in EXTRA_FIELDS if hasattr(record, field)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def audit_subject(request: Request) -> tuple[str | None, str | None]:
    """
    ``(sub, tenant_id)`` of the bearer token on *request*, or ``(None, None)``.

    Invalid or expired tokens are rejected by the route dependencies; here
    they simply mean the request is logged as anonymous.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None, None
    try:
        claims = decode_access_token(token)
    except AuthenticationError:
        return None, None
    return claims.sub, claims.tenant_id


def _client_address(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    return request.client.host if request.client else "unknown"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, logger_name: str = "tenant_iam.access"):
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        context_token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                self._access_line(request, 500, started, failed=True)
                raise
            response.headers["X-Request-ID"] = request_id
            self._access_line(request, response.status_code, started)
            return response
        finally:
            request_id_var.reset(context_token)

    def _access_line(self, request: Request, status_code: int, started: float, failed: bool = False) -> None:
        path = request.url.path
        if path in QUIET_PATHS:
            return

        elapsed = round((time.perf_counter() - started) * 1000, 2)
        subject, tenant_id = audit_subject(request)
        level = logging.ERROR if status_code >= 500 else logging.WARNING if status_code >= 400 else logging.INFO

        self.logger.log(
            level,
            "%s %s -> %d in %.2fms subject=%s%s",
            request.method,
            path,
            status_code,
            elapsed,
            subject or "-",
            " (unhandled error)" if failed else "",
            extra={
                "subject": subject,
                "tenant_id": tenant_id,
                "method": request.method,
                "path": path,
                "status_code": status_code,
                "duration_ms": elapsed,
                "client_ip": _client_address(request),
            },
        )


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(level=log_level.upper(), handlers=[handler], force=True)

    # Quieter than the access log above.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
