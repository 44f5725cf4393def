import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from marketplace.core.exceptions import AppException
from marketplace.core.security import get_password_hash, verify_password, create_access_token
from marketplace.models.user import User
from marketplace.schemas.auth import UserCreate

logger = logging.getLogger(__name__)


def register_user(db: Session, user_in: UserCreate) -> User:
    existing = db.query(User).filter(
        or_(User.email == user_in.email, User.username == user_in.username)
    ).first()
    if existing:
        field = "email" if existing.email == user_in.email else "username"
        raise AppException(
            message=f"A user with this {field} already exists",
            status_code=400,
            error_code="USER_EXISTS",
            details={"field": field},
        )

    user = User(
        name=user_in.name,
        username=user_in.username,
        email=user_in.email,
        hashed_password=get_password_hash(user_in.password),
        role=user_in.role,
        skills=[s.strip() for s in user_in.skills if s.strip()],
        bio=user_in.bio,
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.role.value})")
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def issue_token(user: User) -> str:
    return create_access_token(data={
        "sub": user.email,
        "role": user.role.value,
        "user_id": user.id,
        "type": "access",
    })
