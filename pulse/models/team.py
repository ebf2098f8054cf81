from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Enum

from pulse.db.base import Base
from pulse.models.user import UserStatus, enum_values


class TeamMember(Base):
    """Roster entry shown on the team page"""

    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    role = Column(String(100), nullable=False)  # Job title, not an authorization role
    email = Column(String(255), unique=True, index=True, nullable=False)
    initials = Column(String(5), nullable=False)
    avatar = Column(String, nullable=False, default="bg-slate-900")
    status = Column(
        Enum(UserStatus, native_enum=False, length=16, values_callable=enum_values),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    tasks_completed = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
