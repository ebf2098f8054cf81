from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pulse.db.database import get_async_session
from pulse.api.dependencies.auth import get_current_active_user
from pulse.models.activity import ActivityType
from pulse.models.task import Task
from pulse.models.user import User
from pulse.schemas.activity import ActivityResponse
from pulse.schemas.task import TaskCreate, TaskUpdate, TaskMove, TaskResponse, TaskDetailResponse
from pulse.schemas.response import ApiResponse, ok
from pulse.services.activity_service import ActivityService, describe
from pulse.services.column_service import ColumnService
from pulse.services.project_service import ProjectService
from pulse.services.task_service import TaskService
from pulse.services.user_service import UserService

router = APIRouter(prefix="/tasks", tags=["tasks"])

RECENT_TASK_ACTIVITIES = 10


async def get_task_or_404(db: AsyncSession, task_id: UUID) -> Task:
    task = await TaskService.get_by_id(db, str(task_id))
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )
    return task


async def get_column_or_404(db: AsyncSession, column_id: UUID):
    column = await ColumnService.get_by_id(db, str(column_id))
    if not column:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Column not found"
        )
    return column


async def ensure_project_exists(db: AsyncSession, project_id: Optional[int]) -> None:
    if project_id is not None and not await ProjectService.exists(db, project_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )


async def ensure_user_exists(db: AsyncSession, user_id: Optional[int]) -> None:
    if user_id is not None and not await UserService.get_by_id(db, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )


@router.get("", response_model=ApiResponse[List[TaskResponse]])
async def get_tasks(
    project_id: Optional[int] = Query(None, alias="projectId"),
    column_id: Optional[UUID] = Query(None, alias="columnId"),
    assigned_to_id: Optional[int] = Query(None, alias="assignedToId"),
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Get tasks, newest first"""
    tasks = await TaskService.get_list(
        db,
        project_id=project_id,
        column_id=str(column_id) if column_id else None,
        assigned_to_id=assigned_to_id,
    )
    return ok(tasks, "Tasks retrieved successfully")


@router.get("/{task_id}", response_model=ApiResponse[TaskDetailResponse])
async def get_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Get a task with its latest activities"""
    task = await get_task_or_404(db, task_id)
    activities = await ActivityService.get_for_task(db, task.id, limit=RECENT_TASK_ACTIVITIES)

    task_detail = TaskDetailResponse.model_validate(task).model_copy(
        update={"activities": [ActivityResponse.model_validate(a) for a in activities]}
    )
    return ok(task_detail, "Task retrieved successfully")


@router.post("", response_model=ApiResponse[TaskResponse], status_code=status.HTTP_201_CREATED)
async def create_task(
    task_create: TaskCreate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Create a task in a column"""
    column = await get_column_or_404(db, task_create.column_id)
    await ensure_project_exists(db, task_create.project_id)
    await ensure_user_exists(db, task_create.assigned_to_id)

    # Tasks created on a project board belong to that project
    project_id = task_create.project_id if task_create.project_id is not None else column.project_id

    task = await TaskService.create(
        db,
        title=task_create.title,
        column_id=column.id,
        description=task_create.description,
        priority=task_create.priority,
        project_id=project_id,
        assigned_to_id=task_create.assigned_to_id,
        order=task_create.order,
    )

    await ActivityService.record(
        db,
        ActivityType.TASK_CREATED,
        describe(ActivityType.TASK_CREATED, title=task.title),
        user_id=current_user.id,
        project_id=task.project_id,
        task_id=task.id,
    )
    return ok(task, "Task created successfully")


@router.patch("/{task_id}", response_model=ApiResponse[TaskResponse])
async def update_task(
    task_id: UUID,
    task_update: TaskUpdate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Update a task; completing it refreshes the project progress"""
    task = await get_task_or_404(db, task_id)

    changes = task_update.model_dump(exclude_unset=True)
    if changes.get("column_id") is not None:
        column = await get_column_or_404(db, changes["column_id"])
        changes["column_id"] = column.id
    if "project_id" in changes:
        await ensure_project_exists(db, changes["project_id"])
    if "assigned_to_id" in changes:
        await ensure_user_exists(db, changes["assigned_to_id"])

    task = await TaskService.update(db, task, changes)

    activity_type = ActivityType.TASK_COMPLETED if task_update.completed else ActivityType.TASK_UPDATED
    await ActivityService.record(
        db,
        activity_type,
        describe(activity_type, title=task.title),
        user_id=current_user.id,
        project_id=task.project_id,
        task_id=task.id,
    )
    return ok(task, "Task updated successfully")


@router.patch("/{task_id}/move", response_model=ApiResponse[TaskResponse])
async def move_task(
    task_id: UUID,
    task_move: TaskMove,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Move a task to another column"""
    task = await get_task_or_404(db, task_id)
    source_title = task.column.title if task.column else None
    destination = await get_column_or_404(db, task_move.column_id)

    task = await TaskService.move(db, task, column_id=destination.id, order=task_move.order)

    await ActivityService.record(
        db,
        ActivityType.TASK_UPDATED,
        f'Task "{task.title}" was moved from "{source_title}" to "{destination.title}"',
        user_id=current_user.id,
        project_id=task.project_id,
        task_id=task.id,
    )
    return ok(task, "Task moved successfully")


@router.delete("/{task_id}", response_model=ApiResponse[None])
async def delete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Delete a task; the project progress is recomputed"""
    task = await get_task_or_404(db, task_id)
    await TaskService.delete(db, task)
    return ok(None, "Task deleted successfully")
