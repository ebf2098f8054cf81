from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field

from pulse.models.user import UserStatus
from pulse.schemas.common import CamelModel


class TeamMemberCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    role: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    initials: Optional[str] = Field(None, min_length=1, max_length=5)
    avatar: Optional[str] = None
    status: Optional[UserStatus] = None


class TeamMemberUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    initials: Optional[str] = Field(None, min_length=1, max_length=5)
    avatar: Optional[str] = None
    status: Optional[UserStatus] = None
    tasks_completed: Optional[int] = Field(None, ge=0)


class TeamMemberResponse(CamelModel):
    id: int
    name: str
    role: str
    email: str
    initials: str
    avatar: str
    status: UserStatus
    tasks_completed: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
