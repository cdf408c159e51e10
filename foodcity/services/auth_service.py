import structlog
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from foodcity.core.exceptions import EmailAlreadyExists, InvalidCredentials
from foodcity.core.security import hash_password, verify_password
from foodcity.models.user import User
from foodcity.schemas.user import UserCreate

logger = structlog.get_logger()


def register_user(db: Session, user_in: UserCreate) -> User:
    email = user_in.email.lower()
    if db.query(User.id).filter(User.email == email).first():
        raise EmailAlreadyExists()

    if user_in.phone and db.query(User.id).filter(User.phone == user_in.phone).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Phone number already registered",
        )

    user = User(
        email=email,
        password_hash=hash_password(user_in.password),
        full_name=user_in.full_name.strip(),
        phone=user_in.phone,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration.
        db.rollback()
        raise EmailAlreadyExists()
    db.refresh(user)

    logger.info("user_registered", user_id=user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("login_failed", email_domain=email.rsplit("@", 1)[-1])
        raise InvalidCredentials()

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    if user.is_blocked:
        logger.info("login_blocked", user_id=user.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is blocked")

    logger.info("login_succeeded", user_id=user.id)
    return user
