# app/correlation.py
"""
Request correlation.

Each request gets an id, taken from a well-formed X-Request-Id header or
generated. The id is echoed on the response, stored on request.state and
exposed to log records through RequestIdLogFilter so diagnosis and
checkout logs can be traced back to one call.
"""
from __future__ import annotations

import logging
import re
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 64
SAFE_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

_current_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def validate_request_id(request_id: Optional[str]) -> Optional[str]:
    """Return the id if it is short and log-safe, else None."""
    if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
        return None
    return request_id if SAFE_REQUEST_ID_PATTERN.match(request_id) else None


def get_request_id(request: Optional[Request] = None) -> Optional[str]:
    """Id of the given request, or of the request being handled in this context."""
    if request is not None:
        return getattr(request.state, "request_id", None)
    return _current_request_id.get()


class RequestIdLogFilter(logging.Filter):
    """Adds ``request_id`` to every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _current_request_id.get() or "-"
        return True


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = validate_request_id(request.headers.get(REQUEST_ID_HEADER)) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = _current_request_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _current_request_id.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
