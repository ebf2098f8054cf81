from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pulse.db.database import get_async_session
from pulse.api.dependencies.auth import get_current_active_user
from pulse.models.activity import ActivityType
from pulse.models.project import Project
from pulse.models.user import User
from pulse.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse
from pulse.schemas.response import ApiResponse, ok
from pulse.services.activity_service import ActivityService, describe
from pulse.services.project_service import ProjectService
from pulse.services.user_service import UserService

router = APIRouter(prefix="/projects", tags=["projects"])


async def get_project_or_404(db: AsyncSession, project_id: int) -> Project:
    project = await ProjectService.get_by_id(db, project_id)
    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    return project


async def ensure_owner_exists(db: AsyncSession, owner_id: Optional[int]) -> None:
    if owner_id is not None and not await UserService.get_by_id(db, owner_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )


@router.get("", response_model=ApiResponse[List[ProjectResponse]])
async def get_projects(
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Get all projects with task counts and board columns"""
    projects = await ProjectService.get_all(db)
    return ok(projects, "Projects retrieved successfully")


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Get a project by ID"""
    project = await get_project_or_404(db, project_id)
    return ok(project, "Project retrieved successfully")


@router.post("", response_model=ApiResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(
    project_create: ProjectCreate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Create a project with the default To Do / In Progress / Review / Done board"""
    await ensure_owner_exists(db, project_create.owner_id)

    project = await ProjectService.create(
        db,
        name=project_create.name,
        description=project_create.description,
        due_date=project_create.due_date or None,
        owner_id=project_create.owner_id or current_user.id,
    )

    await ActivityService.record(
        db,
        ActivityType.PROJECT_CREATED,
        describe(ActivityType.PROJECT_CREATED, name=project.name),
        user_id=current_user.id,
        project_id=project.id,
    )
    return ok(project, "Project created successfully")


@router.patch("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def update_project(
    project_id: int,
    project_update: ProjectUpdate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Update a project. Progress is recomputed from tasks unless sent explicitly"""
    project = await get_project_or_404(db, project_id)

    changes = project_update.model_dump(exclude_unset=True)
    await ensure_owner_exists(db, changes.get("owner_id"))

    project = await ProjectService.update(db, project, changes)

    await ActivityService.record(
        db,
        ActivityType.PROJECT_UPDATED,
        describe(ActivityType.PROJECT_UPDATED, name=project.name),
        user_id=current_user.id,
        project_id=project.id,
    )
    return ok(project, "Project updated successfully")


@router.delete("/{project_id}", response_model=ApiResponse[None])
async def delete_project(
    project_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Delete a project (owner or admin only)"""
    project = await get_project_or_404(db, project_id)

    if project.owner_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Only project owner or admin can delete project"
        )

    await ProjectService.delete(db, project_id)
    return ok(None, "Project deleted successfully")
