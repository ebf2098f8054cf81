from typing import Optional
from pydantic import AnyUrl, Field

from pulse.models.user import UserRole, UserStatus
from pulse.schemas.common import CamelModel


class UserUpdate(CamelModel):
    """Schema for profile update"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[UserRole] = None
    avatar: Optional[AnyUrl] = None
    status: Optional[UserStatus] = None
