from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from datetime import datetime

from pulse.models.team import TeamMember
from pulse.models.user import UserStatus, make_initials
from pulse.logs import debug_logger


class TeamService:
    """CRUD operations service for the team roster"""

    @staticmethod
    async def create(
        db: AsyncSession,
        name: str,
        role: str,
        email: str,
        initials: Optional[str] = None,
        avatar: Optional[str] = None,
        status: Optional[UserStatus] = None
    ) -> TeamMember:
        member = TeamMember(
            name=name,
            role=role,
            email=email,
            initials=initials or make_initials(name),
            avatar=avatar or "bg-slate-900",
            status=status or UserStatus.ACTIVE,
            tasks_completed=0,
        )

        db.add(member)
        await db.commit()
        await db.refresh(member)

        debug_logger.info(f"Team member created: {member.id} ({email})")
        return member

    @staticmethod
    async def get_by_id(db: AsyncSession, member_id: int) -> Optional[TeamMember]:
        result = await db.execute(select(TeamMember).where(TeamMember.id == member_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[TeamMember]:
        result = await db.execute(select(TeamMember).where(TeamMember.email == email))
        return result.scalars().first()

    @staticmethod
    async def get_all(db: AsyncSession) -> List[TeamMember]:
        """All members, newest first"""
        result = await db.execute(select(TeamMember).order_by(TeamMember.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        member: TeamMember,
        changes: Dict[str, Any]
    ) -> TeamMember:
        """Apply a partial update; initials follow the name"""
        update_data = {field: value for field, value in changes.items() if value is not None}
        if "name" in update_data:
            update_data["initials"] = make_initials(update_data["name"])

        for field, value in update_data.items():
            setattr(member, field, value)
        member.updated_at = datetime.utcnow()

        await db.commit()
        await db.refresh(member)
        return member

    @staticmethod
    async def delete(db: AsyncSession, member_id: int) -> bool:
        result = await db.execute(delete(TeamMember).where(TeamMember.id == member_id))
        await db.commit()
        return result.rowcount > 0
