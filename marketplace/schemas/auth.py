from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from marketplace.models.user import UserRole
from marketplace.schemas.base import CamelModel

class UserBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    role: UserRole = UserRole.FREELANCER
    skills: List[str] = Field(default_factory=list)
    bio: Optional[str] = Field(default=None, max_length=500)

class UserCreate(UserBase):
    password: str = Field(..., min_length=8)

class UserResponse(UserBase):
    id: int
    is_active: bool
    created_at: datetime

class UserSummary(CamelModel):
    id: int
    name: str
    username: str

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str
    user: Optional[UserResponse] = None

class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None
