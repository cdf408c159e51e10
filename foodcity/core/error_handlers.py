import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded

from foodcity.core.config import settings
from foodcity.core.exceptions import APIError
from foodcity.utils.response import error

logger = structlog.get_logger()


def _split_detail(detail):
    if isinstance(detail, str):
        return detail, []
    if isinstance(detail, list):
        return "Request failed", detail
    if isinstance(detail, dict):
        return detail.get("message", "Request failed"), detail.get("errors", [])
    return "Request failed", []


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("rate_limited", path=request.url.path, limit=str(exc.detail))
    return error(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        message="Too many requests. Please try again later.",
    )


async def api_error_handler(request: Request, exc: APIError):
    return error(exc.message, exc.errors, exc.status_code)


async def http_exception_handler(request: Request, exc: HTTPException):
    message, errors = _split_detail(exc.detail)
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, status_code=exc.status_code, detail=message)
    return error(message, errors, exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation failed",
        errors=exc.errors(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception", error_type=type(exc).__name__, path=request.url.path)

    if settings.DEBUG and settings.ENVIRONMENT != "production":
        return error(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=f"Internal server error: {exc}",
            errors=[{"type": type(exc).__name__}],
        )
    return error(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
