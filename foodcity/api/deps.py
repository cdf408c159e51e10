from typing import Optional

import structlog
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from foodcity.core.security import access_token_user_id
from foodcity.db.session import get_db
from foodcity.middleware.csrf import SESSION_COOKIE_NAME
from foodcity.models.user import User
from foodcity.services.cart_service import CartService

logger = structlog.get_logger()

ACCESS_COOKIE_NAME = SESSION_COOKIE_NAME


def _request_token(request: Request) -> Optional[str]:
    # The httpOnly cookie set at login takes precedence over a bearer header.
    token = request.cookies.get(ACCESS_COOKIE_NAME)
    if token:
        return token
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = _request_token(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    user = db.query(User).filter(User.id == access_token_user_id(token)).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    if current_user.is_blocked:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is blocked")
    return current_user


def require_admin(request: Request, current_user: User = Depends(get_current_active_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")

    logger.info("admin_action", action=f"{request.method} {request.url.path}", admin_user_id=current_user.id)
    return current_user


def get_cart_service(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> CartService:
    """A fresh cart view per request, backed by the user's stored snapshots."""
    return CartService(db, current_user.id)
