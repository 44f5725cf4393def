import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from marketplace.core.config import settings
from marketplace.core.limiter import limiter
from marketplace.database import get_db
from marketplace.models.user import User
from marketplace.routers.auth_deps import get_current_user
from marketplace.schemas.auth import LoginRequest, Token, UserCreate, UserResponse
from marketplace.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
def register(request: Request, user_in: UserCreate, db: Session = Depends(get_db)):
    return auth_service.register_user(db, user_in)

@router.post("/login", response_model=Token)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    # JSON body rather than form-data for frontend compatibility
    user = auth_service.authenticate_user(db, login_data.email, login_data.password)
    if not user:
        logger.warning("Failed login attempt", extra={"email": login_data.email})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=400, detail="User is inactive")

    return {
        "access_token": auth_service.issue_token(user),
        "token_type": "bearer",
        "user": user,
    }

@router.get("/me", response_model=UserResponse)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
