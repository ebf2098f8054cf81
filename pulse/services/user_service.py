from typing import Any, Dict, List, Optional
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from datetime import datetime

from pulse.models.user import User, UserRole, make_initials
from pulse.services.security_service import SecurityService


class UserService:
    """CRUD operations service for User model"""

    @staticmethod
    async def create(
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        role: Optional[UserRole] = None,
        bcrypt_rounds: Optional[int] = None
    ) -> User:
        """Create a new user with a hashed password"""
        hashed_password = await run_in_threadpool(SecurityService.create_password_hash, password, bcrypt_rounds)
        user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            role=role or UserRole.TEAM_MEMBER,
            initials=make_initials(name),
            is_active=True,
        )

        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        user_id: int
    ) -> Optional[User]:
        """Get user by id"""
        query = select(User).where(User.id == user_id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_all(db: AsyncSession) -> List[User]:
        """Get all users, newest first"""
        query = select(User).order_by(User.created_at.desc())
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        user: User,
        changes: Dict[str, Any]
    ) -> User:
        """Update a user's profile; initials follow the name"""
        update_data = {field: value for field, value in changes.items() if value is not None}
        if "name" in update_data:
            update_data["initials"] = make_initials(update_data["name"])

        for field, value in update_data.items():
            setattr(user, field, value)
        user.updated_at = datetime.utcnow()

        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def delete(
        db: AsyncSession,
        user_id: int
    ) -> bool:
        """Delete a user"""
        stmt = delete(User).where(User.id == user_id)
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount > 0
