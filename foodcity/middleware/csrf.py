"""Double-submit cookie protection for cookie-authenticated requests."""
import hmac
from secrets import token_urlsafe

from fastapi import Request, Response

from foodcity.core.config import settings

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
SESSION_COOKIE_NAME = "access_token"
UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

# Endpoints reached before a session exists, or called server-to-server.
_EXEMPT_SUFFIXES = ("/auth/login", "/auth/register", "/auth/logout", "/payments/webhook")
CSRF_EXEMPT_PATHS = frozenset(f"{settings.API_V1_STR}{suffix}" for suffix in _EXEMPT_SUFFIXES)


def generate_csrf_token() -> str:
    return token_urlsafe(32)


def set_csrf_cookie(response: Response, token: str) -> None:
    # Readable by the storefront so it can echo the value back in the header.
    response.set_cookie(
        CSRF_COOKIE_NAME,
        token,
        max_age=24 * 60 * 60,
        path="/",
        httponly=False,
        samesite="lax",
        secure=settings.ENVIRONMENT == "production",
    )


def requires_csrf_check(request: Request) -> bool:
    if request.method not in UNSAFE_METHODS:
        return False
    if SESSION_COOKIE_NAME not in request.cookies:
        return False
    return (request.url.path.rstrip("/") or "/") not in CSRF_EXEMPT_PATHS


def verify_csrf_token(request: Request) -> bool:
    cookie_value = request.cookies.get(CSRF_COOKIE_NAME, "")
    header_value = request.headers.get(CSRF_HEADER_NAME, "")
    return bool(cookie_value and header_value) and hmac.compare_digest(cookie_value, header_value)
