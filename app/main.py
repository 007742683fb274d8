"""HealPet API - FastAPI application entrypoint."""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import load_config, log_config_snapshot
from app.correlation import CorrelationIdMiddleware, RequestIdLogFilter
from app.routers import admin, auth, checkout, diagnosis, history, reviews
from auth.service import cleanup_expired_sessions
from persistence.db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(RequestIdLogFilter())
logger = logging.getLogger(__name__)

# Load and validate configuration at startup
_config = load_config()
log_config_snapshot(_config)

MAX_REQUEST_SIZE_BYTES = _config.max_request_size_bytes

CORS_ALLOW_METHODS = ["POST", "GET", "OPTIONS", "PUT", "DELETE", "PATCH"]
CORS_MAX_AGE_SECONDS = 86400


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared body exceeds the configured limit."""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE_BYTES:
            return JSONResponse(
                status_code=413,
                content={"detail": "Request entity too large"},
            )
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Cache-Control"] = "no-store"
        return response


_SERVICE_START_TIME = datetime.now(timezone.utc)

app = FastAPI(
    title="HealPet",
    description="AI health checks from pet photos",
    version=_config.service_version,
)

# Added in reverse execution order: CORS answers preflights first, then
# correlation id, security headers, size limit.
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=["*"],
    max_age=CORS_MAX_AGE_SECONDS,
)

app.include_router(diagnosis.router)
app.include_router(checkout.router)
app.include_router(auth.router)
app.include_router(history.router)
app.include_router(reviews.router)
app.include_router(admin.router)


@app.on_event("startup")
async def startup_event():
    init_db()
    logger.info("Database initialized")
    cleanup_expired_sessions()


@app.get("/health")
async def health():
    """Health check for Railway."""
    return {
        "status": "healthy",
        "service": _config.service_name,
        "version": _config.service_version,
        "environment": _config.environment,
        "model_configured": _config.model_api_key_present,
        "started_at": _SERVICE_START_TIME.isoformat(),
    }
