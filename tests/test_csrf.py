from starlette.requests import Request

from foodcity.middleware.csrf import requires_csrf_check, verify_csrf_token


def _request(method: str, path: str, cookie: str = "", csrf_header: str = None) -> Request:
    headers = [(b"host", b"testserver")]
    if cookie:
        headers.append((b"cookie", cookie.encode()))
    if csrf_header:
        headers.append((b"x-csrf-token", csrf_header.encode()))
    return Request({"type": "http", "method": method, "path": path, "query_string": b"", "headers": headers})


def test_only_cookie_authenticated_unsafe_requests_are_checked():
    assert requires_csrf_check(_request("POST", "/api/v1/orders/", "access_token=abc"))
    assert not requires_csrf_check(_request("GET", "/api/v1/orders/", "access_token=abc"))
    assert not requires_csrf_check(_request("POST", "/api/v1/orders/"))


def test_exempt_paths_skip_the_check():
    assert not requires_csrf_check(_request("POST", "/api/v1/auth/login", "access_token=abc"))
    assert not requires_csrf_check(_request("POST", "/api/v1/payments/webhook/", "access_token=abc"))


def test_double_submit_token_must_match():
    assert verify_csrf_token(_request("POST", "/api/v1/cart/items", "csrf_token=tok123", "tok123"))
    assert not verify_csrf_token(_request("POST", "/api/v1/cart/items", "csrf_token=tok123", "other"))
    assert not verify_csrf_token(_request("POST", "/api/v1/cart/items", "csrf_token=tok123"))
