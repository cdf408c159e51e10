from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from foodcity.api.deps import ACCESS_COOKIE_NAME, get_current_active_user
from foodcity.core.config import settings
from foodcity.core.rate_limiter import limiter
from foodcity.core.security import create_access_token
from foodcity.db.session import get_db
from foodcity.middleware.csrf import CSRF_COOKIE_NAME, generate_csrf_token, set_csrf_cookie
from foodcity.models.user import User
from foodcity.schemas.user import UserCreate, UserLogin, UserResponse
from foodcity.services import auth_service
from foodcity.utils.response import success

router = APIRouter()


def _secure_cookies(request: Request) -> bool:
    return settings.ENVIRONMENT == "production" and request.url.scheme == "https"


def _set_access_cookie(response: Response, request: Request, token: str) -> None:
    response.set_cookie(
        key=ACCESS_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=_secure_cookies(request),
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )


@router.get("/csrf-token")
def get_csrf_token():
    """Issue the double-submit token the frontend echoes in X-CSRF-Token"""
    response = JSONResponse(content=success(message="CSRF token set"))
    set_csrf_cookie(response, generate_csrf_token())
    return response


@router.post(
    "/register",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Register customer account",
    responses={
        201: {"description": "Registration successful"},
        409: {"description": "Email or phone already registered"},
        422: {"description": "Validation error"},
    },
)
@limiter.limit("5/minute")
def register(request: Request, user_in: UserCreate, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, user_in)
    return success(data=UserResponse.model_validate(user).model_dump(), message="Registration successful")


@router.post(
    "/login",
    response_model=dict,
    summary="Login",
    description="Checks credentials, returns a JWT and also sets it as an httpOnly `access_token` cookie.",
    responses={
        200: {"description": "Login successful"},
        401: {"description": "Invalid credentials"},
        403: {"description": "Account inactive"},
    },
)
@limiter.limit("5/minute")
def login(request: Request, credentials: UserLogin, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, credentials.email, credentials.password)
    access_token = create_access_token(user.id, user.role.value)

    response = JSONResponse(
        content=success(
            data={
                "user": UserResponse.model_validate(user).model_dump(mode="json"),
                "access_token": access_token,
                "token_type": "bearer",
            },
            message="Login successful",
        )
    )
    _set_access_cookie(response, request, access_token)
    return response


@router.get("/me", response_model=dict)
def me(current_user: User = Depends(get_current_active_user)):
    return success(data=UserResponse.model_validate(current_user).model_dump(), message="Profile retrieved")


@router.post("/logout")
def logout(request: Request):
    response = JSONResponse(content=success(message="Logout successful"))
    secure = _secure_cookies(request)
    for cookie in (ACCESS_COOKIE_NAME, CSRF_COOKIE_NAME):
        response.delete_cookie(key=cookie, path="/", samesite="lax", secure=secure)
    return response
