from datetime import datetime
import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum

from pulse.db.base import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    PROJECT_MANAGER = "project_manager"
    TEAM_MEMBER = "team_member"
    VIEWER = "viewer"


class UserStatus(str, enum.Enum):
    ACTIVE = "Active"
    OFFLINE = "Offline"
    AWAY = "Away"


def enum_values(enum_cls):
    """Persist enum values (not member names) in the column"""
    return [member.value for member in enum_cls]


def make_initials(name: str) -> str:
    """First letter of each word, upper-cased, at most two letters"""
    return "".join(part[0] for part in name.split() if part).upper()[:2]


class User(Base):
    """Application account"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(
        Enum(UserRole, native_enum=False, length=32, values_callable=enum_values),
        nullable=False,
        default=UserRole.TEAM_MEMBER,
    )
    avatar = Column(String, nullable=True)
    initials = Column(String(5), nullable=True)
    status = Column(
        Enum(UserStatus, native_enum=False, length=16, values_callable=enum_values),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
