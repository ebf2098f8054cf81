from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pulse.db.database import get_async_session
from pulse.api.dependencies.auth import get_current_active_user
from pulse.models.activity import ActivityType
from pulse.models.user import User
from pulse.schemas.team import TeamMemberCreate, TeamMemberUpdate, TeamMemberResponse
from pulse.schemas.response import ApiResponse, ok
from pulse.services.activity_service import ActivityService, describe
from pulse.services.team_service import TeamService

router = APIRouter(prefix="/team", tags=["team"])


async def get_member_or_404(db: AsyncSession, member_id: int):
    member = await TeamService.get_by_id(db, member_id)
    if not member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Team member not found"
        )
    return member


@router.get("", response_model=ApiResponse[List[TeamMemberResponse]])
async def get_team_members(
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Get all team members"""
    members = await TeamService.get_all(db)
    return ok(members, "Team members retrieved successfully")


@router.get("/{member_id}", response_model=ApiResponse[TeamMemberResponse])
async def get_team_member(
    member_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    member = await get_member_or_404(db, member_id)
    return ok(member, "Team member retrieved successfully")


@router.post("", response_model=ApiResponse[TeamMemberResponse], status_code=status.HTTP_201_CREATED)
async def create_team_member(
    member_create: TeamMemberCreate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Add a member to the roster"""
    if await TeamService.get_by_email(db, member_create.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Team member with this email already exists"
        )

    member = await TeamService.create(
        db,
        name=member_create.name,
        role=member_create.role,
        email=member_create.email,
        initials=member_create.initials,
        avatar=member_create.avatar,
        status=member_create.status,
    )

    await ActivityService.record(
        db,
        ActivityType.MEMBER_ADDED,
        describe(ActivityType.MEMBER_ADDED, name=member.name),
        user_id=current_user.id,
    )
    return ok(member, "Team member created successfully")


@router.patch("/{member_id}", response_model=ApiResponse[TeamMemberResponse])
async def update_team_member(
    member_id: int,
    member_update: TeamMemberUpdate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Update a roster entry"""
    member = await get_member_or_404(db, member_id)

    if member_update.email and member_update.email != member.email:
        if await TeamService.get_by_email(db, member_update.email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Team member with this email already exists"
            )

    member = await TeamService.update(db, member, member_update.model_dump(exclude_unset=True))

    await ActivityService.record(
        db,
        ActivityType.MEMBER_UPDATED,
        describe(ActivityType.MEMBER_UPDATED, name=member.name),
        user_id=current_user.id,
    )
    return ok(member, "Team member updated successfully")


@router.delete("/{member_id}", response_model=ApiResponse[None])
async def delete_team_member(
    member_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    await get_member_or_404(db, member_id)
    await TeamService.delete(db, member_id)
    return ok(None, "Team member deleted successfully")
