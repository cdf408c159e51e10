import time
import uuid

import structlog
from fastapi import FastAPI, Request

from foodcity.core.config import settings
from foodcity.middleware.csrf import requires_csrf_check, verify_csrf_token
from foodcity.utils.response import error

logger = structlog.get_logger()

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://checkout.razorpay.com; "
    "frame-src https://api.razorpay.com https://checkout.razorpay.com; "
    "style-src 'self' 'unsafe-inline';"
)


async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY
    if settings.ENVIRONMENT == "production":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


async def csrf_guard(request: Request, call_next):
    if settings.ENVIRONMENT == "production" and requires_csrf_check(request):
        if not verify_csrf_token(request):
            logger.warning("csrf_rejected", method=request.method, path=request.url.path)
            return error("CSRF validation failed", status_code=403)
    return await call_next(request)


async def request_context(request: Request, call_next):
    """Bind a correlation id, log the request and time it."""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = correlation_id
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

    start_time = time.time()
    logger.info(
        "request_started",
        method=request.method,
        path=request.url.path,
        client_ip=request.client.host if request.client else None,
    )
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(process_time * 1000, 2),
        )
    finally:
        structlog.contextvars.unbind_contextvars("correlation_id")

    response.headers["X-Process-Time"] = str(process_time)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


def register_http_middleware(app: FastAPI) -> None:
    # Added last runs first: context wraps everything, CSRF runs before handlers.
    app.middleware("http")(csrf_guard)
    app.middleware("http")(security_headers)
    app.middleware("http")(request_context)
