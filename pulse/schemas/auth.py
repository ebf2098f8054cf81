from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field

from pulse.models.user import UserRole, UserStatus
from pulse.schemas.common import CamelModel


class UserRegister(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Optional[UserRole] = None


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: UserRole
    avatar: Optional[str] = None
    initials: Optional[str] = None
    status: UserStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    user: UserResponse
    token: str
