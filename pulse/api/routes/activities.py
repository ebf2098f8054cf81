from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pulse.db.database import get_async_session
from pulse.api.dependencies.auth import get_current_active_user
from pulse.models.user import User
from pulse.schemas.activity import ActivityResponse, ActivityPage
from pulse.schemas.response import ApiResponse, ok
from pulse.services.activity_service import ActivityService

router = APIRouter(prefix="/activities", tags=["activities"])


def _page(activities, total: int, limit: int, offset: int) -> dict:
    return {
        "activities": activities,
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "has_more": offset + limit < total,
        },
    }


@router.get("", response_model=ApiResponse[ActivityPage])
async def get_activities(
    project_id: Optional[int] = Query(None, alias="projectId"),
    task_id: Optional[UUID] = Query(None, alias="taskId"),
    user_id: Optional[int] = Query(None, alias="userId"),
    activity_type: Optional[str] = Query(None, alias="type", max_length=50),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Filtered, paginated activity log"""
    activities, total = await ActivityService.get_list(
        db,
        project_id=project_id,
        task_id=str(task_id) if task_id else None,
        user_id=user_id,
        activity_type=activity_type,
        limit=limit,
        offset=offset,
    )
    return ok(_page(activities, total, limit, offset), "Activities retrieved successfully")


# Fixed paths are declared before "/{activity_id}"
@router.get("/recent/feed", response_model=ApiResponse[List[ActivityResponse]])
async def get_recent_activities(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Dashboard feed"""
    activities = await ActivityService.get_recent(db, limit=limit)
    return ok(activities, "Recent activities retrieved successfully")


@router.get("/project/{project_id}", response_model=ApiResponse[ActivityPage])
async def get_project_activities(
    project_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    activities, total = await ActivityService.get_list(
        db, project_id=project_id, limit=limit, offset=offset
    )
    return ok(_page(activities, total, limit, offset), "Project activities retrieved successfully")


@router.get("/{activity_id}", response_model=ApiResponse[ActivityResponse])
async def get_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    activity = await ActivityService.get_by_id(db, activity_id)
    if not activity:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Activity not found"
        )
    return ok(activity, "Activity retrieved successfully")
