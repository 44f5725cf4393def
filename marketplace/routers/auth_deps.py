"""
Authentication and role dependencies for FastAPI endpoints.
"""
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from marketplace.core import security
from marketplace.database import get_db
from marketplace.models.user import User
from marketplace.schemas.auth import TokenData

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Resolve the bearer token to an active user.
    Expired tokens are reported as TOKEN_EXPIRED so clients can re-login.
    """
    payload = security.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise _unauthorized("Could not validate credentials")
    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise _unauthorized("TOKEN_EXPIRED")
    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise _unauthorized("Invalid token type")

    token_data = TokenData(email=payload.get("sub"), role=payload.get("role"))
    if token_data.email is None:
        logger.warning("Authentication failed: Missing subject in token")
        raise _unauthorized("Missing subject in token")

    user = db.query(User).filter(User.email == token_data.email).first()
    if user is None:
        logger.warning("Authentication failed: Unknown user", extra={"email": token_data.email})
        raise _unauthorized("User not found")
    if not user.is_active:
        logger.warning("Authentication failed: Inactive user", extra={"user_id": user.id})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is inactive")
    return user


def require_employer(current_user: User = Depends(get_current_user)) -> User:
    """Employers and hybrids only."""
    if not current_user.is_employer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Employer or hybrid account required"
        )
    return current_user
