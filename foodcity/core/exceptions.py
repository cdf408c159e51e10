from typing import Any, List, Optional

from fastapi import HTTPException, status


class APIError(Exception):
    """Failure carrying field-level ``errors`` alongside the message."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class _KnownError(HTTPException):
    http_status = status.HTTP_400_BAD_REQUEST
    message = "Bad request"

    def __init__(self):
        super().__init__(status_code=self.http_status, detail=self.message)


class ProductNotFound(_KnownError):
    http_status = status.HTTP_404_NOT_FOUND
    message = "Product not found"


class AddonNotFound(_KnownError):
    http_status = status.HTTP_404_NOT_FOUND
    message = "Add-on not found"


class CouponNotFound(_KnownError):
    http_status = status.HTTP_404_NOT_FOUND
    message = "Coupon not found"


class CartItemNotFound(_KnownError):
    http_status = status.HTTP_404_NOT_FOUND
    message = "Cart item not found"


class OrderNotFound(_KnownError):
    http_status = status.HTTP_404_NOT_FOUND
    message = "Order not found"


class EmptyCart(_KnownError):
    message = "Cart is empty"


class InvalidCredentials(_KnownError):
    http_status = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect email or password"


class EmailAlreadyExists(_KnownError):
    http_status = status.HTTP_409_CONFLICT
    message = "Email already registered"


class UserNotFound(_KnownError):
    http_status = status.HTTP_404_NOT_FOUND
    message = "User not found"


class EmployeeNotFound(_KnownError):
    http_status = status.HTTP_404_NOT_FOUND
    message = "Employee not found"


class JobApplicationNotFound(_KnownError):
    http_status = status.HTTP_404_NOT_FOUND
    message = "Job application not found"
